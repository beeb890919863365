"""Tuple fetching shared by check and expand."""

import asyncio
from typing import List

from ....config.constants import WILDCARD
from ....core.value_objects import ObjectRef, RelationTuple
from ...tuples.entities import TupleStore


async def find_matching_tuples(store: TupleStore, obj: ObjectRef, relation: str) -> List[RelationTuple]:
    """Tuples stored on ``obj`` plus those on the namespace wildcard.

    A wildcard tuple (``artwork:*#viewer@...``) applies to every object
    of its namespace, so both are read for concrete objects.
    """
    if obj.is_wildcard:
        return list(await store.find_tuples(obj.namespace, WILDCARD, relation))

    concrete, wildcard = await asyncio.gather(
        store.find_tuples(obj.namespace, obj.id, relation),
        store.find_tuples(obj.namespace, WILDCARD, relation),
    )
    return list(concrete) + list(wildcard)
