"""
Тесты значений Cluster / ClusterSet.
"""

import numpy as np
import pytest

from pixelcluster.core.clusters import Cluster, ClusterSet


def _set():
    return ClusterSet([
        Cluster([0.0, 0.0], 5, index=0),
        Cluster([10.0, 10.0], 2, index=1),
        Cluster([5.0, 5.0], 5, index=2),
        Cluster([20.0, 20.0], 0, index=3),
    ])


class TestClusterSet:

    def test_order_and_stability(self):
        clusters = _set()

        assert list(clusters.member_counts) == [0, 2, 5, 5]
        assert list(clusters.indices) == [3, 1, 0, 2]

    def test_sequence_protocol(self):
        clusters = _set()

        assert len(clusters) == 4
        assert clusters[0].index == 3
        assert [c.index for c in clusters[1:3]] == [1, 0]
        assert clusters[-1].member_count == 5

    def test_means_follow_set_order(self):
        clusters = _set()

        np.testing.assert_array_equal(clusters.means[:, 0], [20.0, 10.0, 0.0, 5.0])
        with pytest.raises(ValueError):
            clusters.means[0, 0] = 1.0

    def test_cluster_copies_input(self):
        centroid = np.array([1.0, 2.0])
        cluster = Cluster(centroid, 3)

        centroid[0] = 99.0

        assert cluster.centroid[0] == 1.0

    def test_equality(self):
        assert _set() == _set()
        assert Cluster([1.0], 2, 0) == Cluster(np.array([1.0]), 2, 0)
        assert Cluster([1.0], 2, 0) != Cluster([1.5], 2, 0)
        assert hash(Cluster([1.0], 2, 0)) == hash(Cluster([1.0], 2, 0))

    def test_nearest_returns_set_position(self):
        clusters = _set()

        assert clusters.nearest([19.0, 19.0]) == 0
        assert clusters.nearest([0.5, 0.5]) == 2

    def test_assign_block(self):
        clusters = _set()

        labels = clusters.assign(np.array([[0.0, 0.0], [9.0, 9.0], [6.0, 6.0]]))

        np.testing.assert_array_equal(labels, [2, 1, 3])

    def test_to_dict(self):
        d = _set().to_dict()

        assert [c["index"] for c in d["clusters"]] == [3, 1, 0, 2]
        assert d["clusters"][0]["centroid"] == [20.0, 20.0]
