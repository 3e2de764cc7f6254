"""Vector Space plugin manifest."""

manifest = {
    "title": "Vector Space",
    "summary": "Evaluate vector and matrix scripts, run linear-algebra operations and manage a basis.",
    "category": "Mathematics",
    "blueprint": "vector_space",
}

__all__ = ["manifest"]
