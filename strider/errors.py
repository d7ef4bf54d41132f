"""Error types raised by strider."""


class ShapeMismatch(ValueError):
    """
    Raised when an operation is attempted on tensors whose shapes do not
    satisfy its constraints.

    Covers every invariant violation in the library: empty shapes, wrong
    index counts, mismatched operands, non-square matrices, singular
    matrices and invalid axes. It is always raised before any output is
    built or any value is written.
    """
