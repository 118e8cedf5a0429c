"""ROM loading and machine factory."""
