"""Environment bootstrap for the 3DGRUT toolchain (CUDA, PyTorch, Kaolin).

Core design goals:
- Validate every precondition before touching the disk
- Fixed, linear provisioning plan per supported CUDA release
- Fail fast on the first failing step
- Configuration passed to child processes explicitly, per step
- Centralized logging
"""

__all__ = []
