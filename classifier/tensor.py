"""Small tensor helpers for turning model outputs into verdicts."""

import torch


def softmax(logits: torch.Tensor) -> torch.Tensor:
    """Numerically stable softmax over a 1D tensor.

    Returns an all-zero tensor when the exponent sum degenerates (e.g. all
    logits are -inf) and an empty tensor for empty input.

    Examples:
        >>> softmax(torch.tensor([0.0, 0.0])).tolist()
        [0.5, 0.5]
    """
    logits = logits.detach().float().flatten()
    if logits.numel() == 0:
        return logits

    exps = torch.exp(logits - logits.max())
    total = exps.sum()
    if not torch.isfinite(total) or total <= 0:
        return torch.zeros_like(logits)
    return exps / total


def top1(values: torch.Tensor) -> tuple[int, float] | None:
    """Return (index, value) of the largest element, or None when empty.

    Ties resolve to the lowest index.
    """
    values = values.flatten()
    if values.numel() == 0:
        return None
    index = int(torch.argmax(values))
    return index, float(values[index])
