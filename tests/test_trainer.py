"""DbscanTrainer 测试"""

import numpy as np
import pytest

from dbscan import (
    DbscanOptions,
    DbscanTrainer,
    InvalidArgumentError,
    create_full_scan_neighbors_searcher,
    ensure_self_inclusion,
)
from dbscan.profiling import CountingOracle

from conftest import Point2D, euclidean_distance


def make_trainer(minimum_points: int, **kwargs) -> DbscanTrainer:
    return DbscanTrainer(DbscanOptions(minimum_points_per_cluster=minimum_points), **kwargs)


def indexed_searcher(points, epsilon):
    """严格小于epsilon的全量扫描索引查询"""
    return lambda i: [j for j, other in enumerate(points)
                      if euclidean_distance(points[i], other) < epsilon]


def test_border_two_groups_and_outlier(borders):
    searcher = create_full_scan_neighbors_searcher(borders, euclidean_distance, 1.0)
    model = make_trainer(4).fit(borders, searcher)

    assert model.n_clusters == 2
    assert model.n_noise == 1
    assert model.noise[0] == borders[0]
    assert len(model.clusters[0]) == 4
    assert len(model.clusters[1]) == 4


def test_border_single_cluster_through_bridge(borders):
    searcher = create_full_scan_neighbors_searcher(borders, euclidean_distance, 2.0)
    model = make_trainer(3).fit(borders, searcher)

    assert model.n_clusters == 1
    assert model.n_noise == 0
    assert len(model.clusters[0]) == 9


def test_noise_promoted_to_border_of_first_cluster(borders):
    searcher = create_full_scan_neighbors_searcher(borders, euclidean_distance, 2.0)
    model = make_trainer(4).fit(borders, searcher)

    assert model.n_clusters == 2
    assert model.n_noise == 0
    assert len(model.clusters[0]) == 5
    assert len(model.clusters[1]) == 4
    # (0, 0) 先被标记为噪声，随后作为第一个簇的边界点
    assert borders[0] in model.clusters[0]
    assert borders[0] not in model.clusters[1]


def test_border_point_claimed_once(borders):
    searcher = create_full_scan_neighbors_searcher(borders, euclidean_distance, 2.0)
    model = make_trainer(5).fit(borders, searcher)

    assert model.n_clusters == 2
    assert model.n_noise == 0
    assert len(model.clusters[0]) == 5
    assert len(model.clusters[1]) == 4


def test_cluster_starts_with_seed(borders):
    searcher = create_full_scan_neighbors_searcher(borders, euclidean_distance, 1.0)
    model = make_trainer(4).fit(borders, searcher)

    assert model.clusters[0][0] == borders[1]
    assert model.clusters[1][0] == borders[5]


@pytest.mark.parametrize("epsilon, minimum_points, n_clusters, n_noise", [
    (1.01, 4, 12, 45),
    (1.3, 4, 15, 30),
    (0.99, 2, 15, 45),
])
def test_ring_dataset(ring_dataset, epsilon, minimum_points, n_clusters, n_noise):
    searcher = create_full_scan_neighbors_searcher(ring_dataset, euclidean_distance, epsilon)
    model = make_trainer(minimum_points).fit(ring_dataset, searcher)

    assert model.n_clusters == n_clusters
    assert model.n_noise == n_noise


@pytest.mark.parametrize("epsilon, minimum_points", [
    (1.01, 4),
    (1.3, 4),
    (0.99, 2),
    (2.5, 3),
])
def test_keyed_and_indexed_agree(ring_dataset, epsilon, minimum_points):
    trainer = make_trainer(minimum_points)
    keyed = trainer.fit(ring_dataset,
                        create_full_scan_neighbors_searcher(ring_dataset, euclidean_distance, epsilon))
    indexed = trainer.fit_indexed(ring_dataset, indexed_searcher(ring_dataset, epsilon))

    keyed_clusters = [set(cluster) for cluster in keyed.clusters]
    indexed_clusters = [{ring_dataset[i] for i in cluster} for cluster in indexed.clusters]

    assert keyed_clusters == indexed_clusters
    assert set(keyed.noise) == {ring_dataset[i] for i in indexed.noise}


def test_indexed_noise_in_index_order(borders):
    model = make_trainer(10).fit_indexed(borders, indexed_searcher(borders, 1.0))

    assert model.clusters == ()
    assert model.noise == tuple(range(len(borders)))


def test_all_points_one_cluster_with_threshold_one(borders):
    model = make_trainer(1).fit(borders, lambda p: borders)

    assert model.n_clusters == 1
    assert set(model.clusters[0]) == set(borders)
    assert model.noise == ()


def test_threshold_above_point_count_gives_all_noise(borders):
    model = make_trainer(len(borders) + 1).fit(borders, lambda p: borders)

    assert model.clusters == ()
    assert set(model.noise) == set(borders)


def test_isolated_points_with_threshold_one_are_singleton_clusters(borders):
    model = make_trainer(1).fit(borders, lambda p: [p])

    assert model.n_clusters == len(borders)
    assert all(len(cluster) == 1 for cluster in model.clusters)
    assert model.n_noise == 0


def test_empty_input():
    trainer = make_trainer(2)

    assert trainer.fit([], lambda p: [p]).n_points == 0
    model = trainer.fit_indexed(np.empty((0, 2)), lambda i: [i])
    assert model.clusters == ()
    assert model.noise == ()


def test_duplicate_input_points_counted_once(borders):
    searcher = create_full_scan_neighbors_searcher(borders, euclidean_distance, 1.0)
    model = make_trainer(4).fit(borders + borders, searcher)

    assert model.n_points == len(borders)


def test_custom_key_strategy():
    words = ["Apple", "apple", "APPLE", "pear", "Pear", "plum"]

    def oracle(word):
        return [w for w in words if w.lower() == word.lower()]

    model = make_trainer(2, key=str.lower).fit(words, oracle)

    assert model.n_clusters == 2
    assert model.clusters[0] == ("Apple",)
    assert model.clusters[1] == ("pear",)
    assert model.noise == ("plum",)


def test_oracle_omitting_self_undercounts_by_one(borders):
    with_self = create_full_scan_neighbors_searcher(borders, euclidean_distance, 1.0)

    def without_self(p):
        return [q for q in with_self(p) if q != p]

    trainer = make_trainer(4)
    assert trainer.fit(borders, without_self).n_clusters == 0

    expected = trainer.fit(borders, with_self)
    shifted = make_trainer(3).fit(borders, without_self)
    assert [set(c) for c in shifted.clusters] == [set(c) for c in expected.clusters]
    assert set(shifted.noise) == set(expected.noise)

    repaired = trainer.fit(borders, ensure_self_inclusion(without_self))
    assert [set(c) for c in repaired.clusters] == [set(c) for c in expected.clusters]


def test_each_point_queried_once(ring_dataset):
    oracle = CountingOracle(create_full_scan_neighbors_searcher(ring_dataset, euclidean_distance, 1.3))
    make_trainer(4).fit(ring_dataset, oracle)

    assert oracle.max_calls_per_point() == 1
    assert oracle.total_calls == len(ring_dataset)


def test_oracle_errors_propagate(borders):
    def oracle(point):
        raise RuntimeError("index unavailable")

    with pytest.raises(RuntimeError, match="index unavailable"):
        make_trainer(2).fit(borders, oracle)


def test_oracle_returning_numpy_indices(borders_array):
    def oracle(i):
        distances = np.linalg.norm(borders_array - borders_array[i], axis=1)
        return np.flatnonzero(distances < 1.0)

    model = make_trainer(4).fit_indexed(borders_array, oracle)

    assert model.n_clusters == 2
    assert list(model.noise) == [0]
    assert sorted(int(i) for i in model.clusters[0]) == [1, 2, 3, 4]


@pytest.mark.parametrize("method", ["fit", "fit_indexed"])
def test_missing_arguments(method, borders):
    trainer = make_trainer(2)
    fit = getattr(trainer, method)

    with pytest.raises(InvalidArgumentError):
        fit(None, lambda p: [p])
    with pytest.raises(InvalidArgumentError):
        fit(borders, None)
    with pytest.raises(InvalidArgumentError):
        fit(borders, "not callable")


def test_missing_options():
    with pytest.raises(InvalidArgumentError):
        DbscanTrainer(None)
    with pytest.raises(InvalidArgumentError):
        DbscanTrainer({"minimum_points_per_cluster": 3})


def test_invalid_argument_is_value_error():
    with pytest.raises(ValueError):
        DbscanTrainer(None)


def test_execution_time_and_verbose(borders, capsys):
    trainer = make_trainer(4, verbose=True)
    trainer.fit(borders, create_full_scan_neighbors_searcher(borders, euclidean_distance, 1.0))

    assert trainer.execution_time >= 0
    assert "2 个簇" in capsys.readouterr().out


def test_labels_do_not_leak_between_runs(borders):
    trainer = make_trainer(4)
    searcher = create_full_scan_neighbors_searcher(borders, euclidean_distance, 1.0)

    first = trainer.fit(borders, searcher)
    second = trainer.fit(borders, searcher)

    assert first == second
    assert Point2D(0, 0) in second.noise


def test_profiler_records_fit_scan_and_expansions(borders):
    from dbscan.profiling import TimeProfiler

    profiler = TimeProfiler()
    trainer = make_trainer(4, profiler=profiler)
    trainer.fit(borders, create_full_scan_neighbors_searcher(borders, euclidean_distance, 1.0))
    trainer.fit_indexed(borders, indexed_searcher(borders, 1.0))

    timings = profiler.get_summary()['timings']
    assert timings['fit']['n_calls'] == 2
    assert timings['scan']['n_calls'] == 2
    assert timings['build_cluster']['n_calls'] == 4

    fit_measurement = profiler.measurements[0]
    assert fit_measurement.name == 'fit'
    assert [m.name for m in fit_measurement.children] == ['scan']
    assert [m.name for m in fit_measurement.children[0].children] == ['build_cluster', 'build_cluster']
    assert profiler.current_stack == []
