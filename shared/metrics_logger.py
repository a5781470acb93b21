"""
Metrics logging for simulation analysis.
Logs tick durations, ship motion samples, prediction and interpolation errors.
"""

import json
import os
import time


class MetricsLogger:
    """Collects and persists simulation metrics."""

    def __init__(self, log_dir: str = 'analysis/logs', verbose: bool = True):
        os.makedirs(log_dir, exist_ok=True)
        self.log_dir = log_dir
        self.verbose = verbose
        self.start_time = time.time()
        self.data = {
            'tick_times': [],
            'ships': [],
            'prediction_error': [],
            'interpolation_lag': [],
        }

    def _elapsed(self) -> float:
        return round(time.time() - self.start_time, 4)

    def log_tick_time(self, tick: int, duration_ms: float):
        self.data['tick_times'].append({
            'tick': tick, 'duration_ms': round(duration_ms, 4)
        })

    def log_ship_sample(self, tick: int, ship_id, state):
        """Record a ShipState sample."""
        self.data['ships'].append({
            'tick': tick,
            'ship_id': ship_id,
            'x': round(state.x, 3),
            'y': round(state.y, 3),
            'rotation': round(state.rotation, 5),
            'speed': round(state.current_speed, 4),
            'steering': state.steering_direction,
            'anchored': state.is_anchored,
        })

    def log_prediction_error(self, error_px: float):
        self.data['prediction_error'].append({
            't': self._elapsed(), 'error_px': round(error_px, 3)
        })

    def log_interpolation_lag(self, entity_id, lag_px: float):
        """Distance between the rendered pose and the latest known pose."""
        self.data['interpolation_lag'].append({
            't': self._elapsed(), 'entity_id': entity_id,
            'lag_px': round(lag_px, 3)
        })

    def save(self, filename: str = 'metrics.json'):
        path = os.path.join(self.log_dir, filename)
        with open(path, 'w') as f:
            json.dump(self.data, f, indent=2)
        if self.verbose:
            print(f"[METRICS] Saved to {path}", flush=True)
        return path

    def get_summary(self) -> dict:
        """Compute summary statistics."""
        summary = {}
        ticks = [t['duration_ms'] for t in self.data['tick_times']]
        if ticks:
            ticks_sorted = sorted(ticks)
            summary['tick_time_mean'] = sum(ticks) / len(ticks)
            summary['tick_time_max'] = max(ticks)
            summary['tick_time_p95'] = ticks_sorted[int(len(ticks_sorted) * 0.95)]

        speeds = [s['speed'] for s in self.data['ships']]
        if speeds:
            summary['ship_speed_mean'] = sum(speeds) / len(speeds)
            summary['ship_speed_max'] = max(speeds)

        errors = [e['error_px'] for e in self.data['prediction_error']]
        if errors:
            summary['prediction_error_mean'] = sum(errors) / len(errors)
            summary['prediction_error_max'] = max(errors)

        lags = [l['lag_px'] for l in self.data['interpolation_lag']]
        if lags:
            summary['interpolation_lag_mean'] = sum(lags) / len(lags)

        return summary
