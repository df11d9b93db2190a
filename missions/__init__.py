"""Mission-specific orchestration built on the LDP kernels."""
