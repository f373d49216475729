"""Effect toggles for a preview session and construction of the node chain."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from tabrecorder.preview.filters import (
    DynamicsCompressor,
    FilterChain,
    GainFilter,
    HighPassFilter,
    MultiTapReverb,
)

HIGHPASS_CUTOFF_HZ = 80.0
MIN_BOOST = 1.0
MAX_BOOST = 3.0


class EffectConfig(BaseModel):
    """Voice processing toggles for one preview session; never persisted."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    highpass: bool = False
    noise_gate: bool = False
    compressor: bool = False
    echo: bool = False
    boost: float = Field(default=MIN_BOOST, ge=MIN_BOOST, le=MAX_BOOST)  # 1.0 = off


def build_chain(config: EffectConfig, sample_rate: int, channels: int) -> FilterChain:
    """Build the configured preview chain.

    Node order is fixed: high-pass, noise gate, boost, compressor, reverb.
    Disabled effects are left out entirely, so a config with everything off
    yields an empty (dry passthrough) chain.
    """
    chain = FilterChain("Preview")

    if config.highpass:
        chain.add_filter(HighPassFilter(HIGHPASS_CUTOFF_HZ))

    # The gate sits before boost so boosted room noise is not let through
    if config.noise_gate:
        chain.add_filter(
            DynamicsCompressor(
                threshold_db=-50.0,
                ratio=20.0,
                knee_db=0.0,
                attack=0.003,
                release=0.1,
                name="NoiseGate",
            )
        )

    if config.boost > MIN_BOOST:
        chain.add_filter(GainFilter(config.boost, name="Boost"))

    if config.compressor:
        chain.add_filter(
            DynamicsCompressor(
                threshold_db=-24.0,
                ratio=4.0,
                knee_db=30.0,
                attack=0.003,
                release=0.25,
                name="Compressor",
            )
        )

    if config.echo:
        chain.add_filter(MultiTapReverb())

    chain.configure(sample_rate, channels)
    return chain
