"""
Tests for the metrics analysis helpers.
"""

import json
import os
import shutil
import tempfile
import unittest

from analysis.plot_results import (
    analyze_all, load_metrics, plot_client_corrections, plot_ship_motion,
    plot_tick_budget, ship_series, summarize
)


def sample_data():
    return {
        'tick_times': [{'tick': i, 'duration_ms': 0.5 + 0.1 * i} for i in range(10)],
        'ships': [
            {'tick': t, 'ship_id': 1, 'x': 0.0, 'y': -10.0 * t,
             'rotation': 0.0, 'speed': 10.0 * t, 'steering': 0, 'anchored': False}
            for t in (2, 0, 1)
        ],
        'prediction_error': [{'t': 0.1, 'error_px': 6.0}, {'t': 0.2, 'error_px': 8.0}],
        'interpolation_lag': [{'t': 0.1, 'entity_id': 2, 'lag_px': 3.0}],
    }


class TestSummary(unittest.TestCase):

    def test_series_sorted_by_tick(self):
        series = ship_series(sample_data())
        self.assertEqual(list(series[1]['tick']), [0, 1, 2])

    def test_summarize(self):
        summary = summarize(sample_data())
        self.assertAlmostEqual(summary['ship_1_distance'], 20.0)
        self.assertAlmostEqual(summary['ship_1_speed_final'], 20.0)
        self.assertAlmostEqual(summary['prediction_error_mean'], 7.0)
        self.assertAlmostEqual(summary['interpolation_lag_mean'], 3.0)
        self.assertAlmostEqual(summary['tick_time_max'], 1.4)

    def test_summarize_empty(self):
        self.assertEqual(summarize({}), {})


class TestPlots(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_plots_written(self):
        data = sample_data()
        for plot in (plot_ship_motion, plot_client_corrections, plot_tick_budget):
            path = plot(data, self.tmpdir)
            self.assertTrue(os.path.exists(path))

    def test_no_data_no_plot(self):
        self.assertIsNone(plot_ship_motion({}, self.tmpdir))
        self.assertIsNone(plot_client_corrections({}, self.tmpdir))
        self.assertIsNone(plot_tick_budget({}, self.tmpdir))

    def test_analyze_file(self):
        path = os.path.join(self.tmpdir, 'metrics.json')
        data = sample_data()
        del data['interpolation_lag']
        with open(path, 'w') as f:
            json.dump(data, f)

        self.assertEqual(load_metrics(path)['interpolation_lag'], [])
        summary = analyze_all(path, self.tmpdir)
        self.assertIn('ship_1_distance', summary)
        self.assertTrue(os.path.exists(os.path.join(self.tmpdir, 'tick_budget.png')))


if __name__ == '__main__':
    unittest.main()
