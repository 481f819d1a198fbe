"""
Diagnostic CSV dump of named tensors.

Each tensor becomes one section of the file:

    simulatedResultTensor,[4,4,2]
    i,j,0,1
    0,0,5,-3
    1,0,12,7
    ...

Rows are spatial positions (j outer, i inner) and columns are depth indices.
Integer tensors print signed integers, floating tensors print decimals.
Filter banks write one section per filter, named name[c].
"""

import logging
from collections.abc import Mapping
from pathlib import Path

from ..tensor import Tensor, TensorArray

logger = logging.getLogger(__name__)


def write_csv_dump(path: str | Path, tensors: Mapping[str, Tensor | TensorArray]) -> Path:
    """
    Write every named tensor to one CSV file.

    Args:
        path: Output file path (overwritten)
        tensors: Ordered mapping of section name to tensor or filter bank

    Returns:
        The path written

    Raises:
        OSError: If the file cannot be opened or written
    """
    path = Path(path)
    with open(path, "w") as f:
        for name, tensor in tensors.items():
            tensor.csv_dump(f, name)
    logger.info("Wrote %d tensors to %s", len(tensors), path)
    return path
