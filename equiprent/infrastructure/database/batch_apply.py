"""
Write-batch application shared by the document store backends.

Both backends load the current (data, version) of every touched document,
run ``apply_batch`` and persist the result only if it returns.
"""

from copy import deepcopy
from typing import Any, Dict, List, Optional, Tuple

from equiprent.domain.interfaces.document_store import WriteOp, WriteOpType
from equiprent.domain.models.exceptions import (
    ConcurrentModificationError,
    ConsistencyWriteError,
)

Key = Tuple[str, str]
Entry = Tuple[Dict[str, Any], int]


def apply_batch(
    current: Dict[Key, Optional[Entry]],
    ops: List[WriteOp],
) -> Dict[Key, Optional[Entry]]:
    """
    Apply ops to a snapshot of the touched documents.

    Args:
        current: Stored (data, version) per touched key, None when absent
        ops: Operations in submission order

    Returns:
        New (data, version) per touched key, None for deleted documents.
        Each touched document's version moves by exactly one.

    Raises:
        ConcurrentModificationError: expected_version mismatch
        ConsistencyWriteError: UPDATE against a missing document
    """
    staged: Dict[Key, Optional[Dict[str, Any]]] = {
        key: deepcopy(entry[0]) if entry else None for key, entry in current.items()
    }
    for op in ops:
        entry = current[op.key]
        if op.expected_version is not None:
            actual = entry[1] if entry else 0
            if actual != op.expected_version:
                raise ConcurrentModificationError(
                    op.collection, op.doc_id, op.expected_version, actual if entry else None
                )

        if op.op_type == WriteOpType.SET:
            staged[op.key] = deepcopy(op.data or {})
        elif op.op_type == WriteOpType.UPDATE:
            if staged[op.key] is None:
                raise ConsistencyWriteError(
                    f"Cannot update missing document {op.collection}/{op.doc_id}",
                    collection=op.collection,
                    doc_id=op.doc_id,
                )
            staged[op.key].update(deepcopy(op.data or {}))
        else:
            staged[op.key] = None

    result: Dict[Key, Optional[Entry]] = {}
    for key, data in staged.items():
        if data is None:
            result[key] = None
        else:
            previous = current[key]
            result[key] = (data, (previous[1] if previous else 0) + 1)
    return result


__all__ = ["apply_batch", "Key", "Entry"]
