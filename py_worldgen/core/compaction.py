"""
Tree compaction.

Run immediately before serialization. Trees are bucketed into a uniform
grid; every cell holding more than one tree becomes a single ``tree_cluster``
record placed where the cell's first tree was. Singletons and all non-tree
objects are left untouched, so running compaction again is a no-op.
"""

from typing import Dict, List, Optional

import numpy as np
import structlog
from pydantic import BaseModel, ConfigDict, Field

from .models import ClusterMember, CompactionStats, EnvironmentObject, Vec3, WorldDocument

logger = structlog.get_logger()

TREE_TYPE = "tree"
TREE_CLUSTER_TYPE = "tree_cluster"


class CompactionOptions(BaseModel):
    """Tree compaction options."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    cell_size: float = Field(default=20.0, gt=0, description="Grid cell size for tree batching")
    keep_members: bool = Field(
        default=True, description="Store member positions relative to the cluster centroid"
    )


class TreeCompactor:
    """Replaces dense tree cells with aggregate cluster records."""

    def __init__(self, options: Optional[CompactionOptions] = None):
        self.options = options or CompactionOptions()

    def compact(self, document: WorldDocument) -> WorldDocument:
        """
        Compact the trees of a document.

        Args:
            document: Document to compact, left unmodified

        Returns:
            A new document with clustered trees and compaction stats. A
            document without trees that was already compacted is returned as is
        """
        environment = document.environment
        tree_indices = [i for i, obj in enumerate(environment) if obj.type == TREE_TYPE]
        if not tree_indices:
            logger.debug("No trees to compact")
            if document.metadata.compaction is not None:
                return document
            stats = CompactionStats(
                original_tree_count=0,
                cluster_count=0,
                singleton_count=0,
                output_tree_records=0,
                compression_ratio=1.0,
                cell_size=self.options.cell_size,
            )
            metadata = document.metadata.model_copy(update={"compaction": stats})
            return document.model_copy(update={"metadata": metadata})

        positions = np.array(
            [[environment[i].position.x, environment[i].position.z] for i in tree_indices],
            dtype=np.float64,
        )
        cells = np.floor(positions / self.options.cell_size).astype(np.int64)
        _, groups = np.unique(cells, axis=0, return_inverse=True)
        groups = groups.reshape(-1)

        members: Dict[int, List[int]] = {}
        for tree_index, group in zip(tree_indices, groups.tolist()):
            members.setdefault(group, []).append(tree_index)

        # First tree of each multi-tree cell -> its cluster record
        replacements: Dict[int, EnvironmentObject] = {}
        absorbed = set()
        for indices in members.values():
            if len(indices) < 2:
                continue
            replacements[indices[0]] = self._cluster([environment[i] for i in indices])
            absorbed.update(indices[1:])

        compacted = []
        for i, obj in enumerate(environment):
            if i in absorbed:
                continue
            compacted.append(replacements.get(i, obj))

        original = len(tree_indices)
        cluster_count = len(replacements)
        singleton_count = original - sum(len(m) for m in members.values() if len(m) > 1)
        output_records = cluster_count + singleton_count
        stats = CompactionStats(
            original_tree_count=original,
            cluster_count=cluster_count,
            singleton_count=singleton_count,
            output_tree_records=output_records,
            compression_ratio=round(original / output_records, 4),
            cell_size=self.options.cell_size,
        )

        logger.info(
            "Trees compacted",
            original=original,
            clusters=cluster_count,
            singletons=singleton_count,
            ratio=stats.compression_ratio,
        )

        metadata = document.metadata.model_copy(update={"compaction": stats})
        return document.model_copy(update={"environment": compacted, "metadata": metadata})

    def _cluster(self, trees: List[EnvironmentObject]) -> EnvironmentObject:
        coords = np.array([[t.position.x, t.position.y, t.position.z] for t in trees])
        sizes = np.array([t.size if t.size is not None else 1.0 for t in trees])

        centroid = coords.mean(axis=0)
        offsets = coords - centroid
        radius = float(np.hypot(offsets[:, 0], offsets[:, 2]).max())

        cluster = EnvironmentObject(
            type=TREE_CLUSTER_TYPE,
            position=Vec3(x=float(centroid[0]), y=float(centroid[1]), z=float(centroid[2])),
            theme=trees[0].theme,
            tree_count=len(trees),
            avg_size=float(sizes.mean()),
            radius=radius,
        )
        if self.options.keep_members:
            cluster.trees = [
                ClusterMember(
                    relative_position=Vec3(x=float(dx), y=float(dy), z=float(dz)),
                    size=float(size),
                )
                for (dx, dy, dz), size in zip(offsets, sizes)
            ]
        return cluster


def compact_trees(document: WorldDocument, cell_size: float = 20.0, keep_members: bool = True) -> WorldDocument:
    return TreeCompactor(CompactionOptions(cell_size=cell_size, keep_members=keep_members)).compact(document)
