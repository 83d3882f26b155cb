"""
Сквозные тесты командной строки.
"""

import json

import numpy as np

from pixelcluster.main import main


class TestMain:

    def test_synthetic_run(self, tmp_path):
        out = tmp_path / "summary.json"
        labels = tmp_path / "labels.npy"

        code = main([
            "--synthetic", "-k", "3", "--passes", "5", "--seed", "1",
            "--output", str(out), "--labels", str(labels),
        ])

        assert code == 0
        summary = json.loads(out.read_text(encoding="utf-8"))
        assert summary["config"]["cluster_count"] == 3
        assert summary["passes"] == 5
        assert sum(c["member_count"] for c in summary["clusters"]) == 64 * 64
        label_image = np.load(labels)
        assert label_image.shape == (64, 64)
        assert set(np.unique(label_image)) <= {0, 1, 2}

    def test_input_file_with_shift_stopping(self, tmp_path):
        path = tmp_path / "samples.npy"
        np.save(path, np.array([[0.0, 0.0], [0.0, 1.0], [9.0, 9.0], [10.0, 9.0]]))
        out = tmp_path / "summary.json"

        code = main([
            "--input", str(path), "-k", "2", "--stopping", "centroid_shift",
            "--tol", "1e-12", "--seed", "0", "--output", str(out),
        ])

        assert code == 0
        summary = json.loads(out.read_text(encoding="utf-8"))
        assert summary["converged"]
        assert [c["member_count"] for c in summary["clusters"]] == [2, 2]

    def test_clustering_error_exit_code(self, tmp_path):
        path = tmp_path / "flat.npy"
        np.save(path, np.ones((10, 2)))

        assert main(["--input", str(path), "-k", "3", "--seed", "0"]) == 2
