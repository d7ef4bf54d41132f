"""GEMM on a torch device (CUDA when available)."""

from __future__ import annotations
import logging
from typing import Optional, Union

import numpy as np
import torch

from .base import MatMulBackend

logger = logging.getLogger(__name__)


def default_device() -> torch.device:
    """CUDA device 0 if torch can see a GPU, otherwise the CPU."""
    if torch.cuda.is_available():
        return torch.device("cuda")
    return torch.device("cpu")


class TorchBackend(MatMulBackend):
    """
    GEMM with ``torch.addmm`` in float64.

    Operands are copied to the device for every call and the result is
    copied back, so the call blocks until the device has finished.

    Args:
        device: Torch device or device string; defaults to
            :func:`default_device`
    """

    name = "torch"

    def __init__(self, device: Optional[Union[str, torch.device]] = None):
        self.device = torch.device(device) if device is not None else default_device()
        logger.info("Torch matmul backend using device %s", self.device)

    def _gemm(
        self,
        a: np.ndarray,
        b: np.ndarray,
        c: Optional[np.ndarray],
        alpha: float,
        beta: float,
    ) -> np.ndarray:
        ta = torch.as_tensor(a, dtype=torch.float64, device=self.device)
        tb = torch.as_tensor(b, dtype=torch.float64, device=self.device)
        if c is None:
            out = torch.mm(ta, tb)
            if alpha != 1.0:
                out = out * alpha
        else:
            tc = torch.as_tensor(c, dtype=torch.float64, device=self.device)
            out = torch.addmm(tc, ta, tb, beta=beta, alpha=alpha)
        if self.device.type == "cuda":
            torch.cuda.synchronize(self.device)
        return out.cpu().numpy()

    def __repr__(self) -> str:
        return f"TorchBackend(device='{self.device}')"
