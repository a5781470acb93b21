"""
Analysis and visualization of simulation metrics.
Plots ship motion, client corrections and server tick cost from the
JSON files written by MetricsLogger.
"""

import json
import os

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np

from shared.config import DEFAULT_TICK_RATE, RECONCILE_POSITION_THRESHOLD


def load_metrics(path: str) -> dict:
    with open(path) as fp:
        data = json.load(fp)
    for key in ('tick_times', 'ships', 'prediction_error', 'interpolation_lag'):
        data.setdefault(key, [])
    return data


def ship_series(data: dict) -> dict:
    """Group ship samples by ship id: ship_id -> dict of numpy arrays."""
    grouped = {}
    for s in data.get('ships', []):
        grouped.setdefault(s['ship_id'], []).append(s)

    series = {}
    for sid, samples in grouped.items():
        samples.sort(key=lambda s: s['tick'])
        series[sid] = {
            'tick': np.array([s['tick'] for s in samples]),
            'x': np.array([s['x'] for s in samples]),
            'y': np.array([s['y'] for s in samples]),
            'speed': np.array([s['speed'] for s in samples]),
            'rotation': np.array([s['rotation'] for s in samples]),
        }
    return series


def plot_ship_motion(data: dict, output_dir: str = 'analysis'):
    """Speed, heading and trajectory of every sampled ship."""
    series = ship_series(data)
    if not series:
        print("[ANALYSIS] No ship samples.")
        return None

    os.makedirs(output_dir, exist_ok=True)

    fig, axes = plt.subplots(1, 3, figsize=(18, 5))
    fig.suptitle('Ship Motion', fontsize=14, fontweight='bold')

    # ── 1. Speed over time ──
    ax = axes[0]
    for sid, s in series.items():
        ax.plot(s['tick'], s['speed'], linewidth=1.0, label=f'Ship {sid}')
    ax.set_title('Speed')
    ax.set_xlabel('Tick')
    ax.set_ylabel('Speed (px/s)')
    ax.legend(fontsize=9)
    ax.grid(True, alpha=0.3)

    # ── 2. Heading over time ──
    ax = axes[1]
    for sid, s in series.items():
        ax.plot(s['tick'], np.degrees(s['rotation']), linewidth=0.8,
                label=f'Ship {sid}')
    ax.set_title('Heading')
    ax.set_xlabel('Tick')
    ax.set_ylabel('Rotation (deg)')
    ax.grid(True, alpha=0.3)

    # ── 3. Trajectory (screen coordinates: y grows downward) ──
    ax = axes[2]
    for sid, s in series.items():
        ax.plot(s['x'], s['y'], linewidth=1.0, label=f'Ship {sid}')
        ax.scatter(s['x'][:1], s['y'][:1], marker='o', s=20)
    ax.invert_yaxis()
    ax.set_aspect('equal', adjustable='datalim')
    ax.set_title('Trajectory')
    ax.set_xlabel('x (px)')
    ax.set_ylabel('y (px)')
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    path = os.path.join(output_dir, 'ship_motion.png')
    plt.savefig(path, dpi=150)
    print(f"[ANALYSIS] Saved: {path}")
    plt.close(fig)
    return path


def plot_client_corrections(data: dict, output_dir: str = 'analysis'):
    """Reconciliation error at the helm and interpolation lag of remote players."""
    errors = data.get('prediction_error', [])
    lags = data.get('interpolation_lag', [])
    if not errors and not lags:
        print("[ANALYSIS] No client-side data.")
        return None

    os.makedirs(output_dir, exist_ok=True)

    fig, (ax_err, ax_lag) = plt.subplots(1, 2, figsize=(13, 5))
    fig.suptitle('Client Corrections', fontsize=13)

    if errors:
        t = np.array([e['t'] for e in errors])
        err = np.array([e['error_px'] for e in errors])
        ax_err.scatter(t, err, s=6, color='purple', label='Reported error')
        ax_err.axhline(y=RECONCILE_POSITION_THRESHOLD, color='red',
                       linestyle=':', label='Rewind threshold')
        ax_err.legend(fontsize=9)
    ax_err.set_title('Helm Prediction Error')
    ax_err.set_xlabel('Time (s)')
    ax_err.set_ylabel('Position error (px)')
    ax_err.grid(True, alpha=0.3)

    if lags:
        by_entity = {}
        for l in lags:
            by_entity.setdefault(l['entity_id'], []).append(l['lag_px'])
        ax_lag.hist(list(by_entity.values()), bins=30, stacked=True,
                    label=[str(eid) for eid in by_entity])
        ax_lag.legend(title='Entity', fontsize=8)
    ax_lag.set_title('Interpolation Lag')
    ax_lag.set_xlabel('Distance behind latest snapshot (px)')
    ax_lag.set_ylabel('Frames')
    ax_lag.grid(True, alpha=0.3)

    fig.tight_layout()
    path = os.path.join(output_dir, 'client_corrections.png')
    fig.savefig(path, dpi=150)
    print(f"[ANALYSIS] Saved: {path}")
    plt.close(fig)
    return path


def plot_tick_budget(data: dict, output_dir: str = 'analysis',
                     tick_rate: int = DEFAULT_TICK_RATE):
    """Server tick cost against the time available per tick."""
    samples = data.get('tick_times', [])
    if not samples:
        return None

    os.makedirs(output_dir, exist_ok=True)

    ticks = np.array([s['tick'] for s in samples])
    cost = np.array([s['duration_ms'] for s in samples])
    budget = 1000.0 / tick_rate
    p99 = np.percentile(cost, 99)

    fig, ax = plt.subplots(figsize=(10, 4))
    ax.plot(ticks, cost, linewidth=0.5, color='#00796B', label='Tick cost')
    ax.axhline(y=p99, color='orange', linestyle='--', label=f'p99: {p99:.3f} ms')
    ax.axhline(y=budget, color='red', linestyle=':',
               label=f'Budget @ {tick_rate} Hz: {budget:.1f} ms')
    ax.set_yscale('log')
    ax.set_title('Server Tick Cost')
    ax.set_xlabel('Tick')
    ax.set_ylabel('Duration (ms)')
    ax.legend(fontsize=9)
    ax.grid(True, alpha=0.3, which='both')

    fig.tight_layout()
    path = os.path.join(output_dir, 'tick_budget.png')
    fig.savefig(path, dpi=150)
    print(f"[ANALYSIS] Saved: {path}")
    plt.close(fig)
    return path


def summarize(data: dict) -> dict:
    """Numeric summary of a metrics file."""
    summary = {}

    ticks = [t['duration_ms'] for t in data.get('tick_times', [])]
    if ticks:
        arr = np.array(ticks)
        summary['tick_time_mean'] = float(np.mean(arr))
        summary['tick_time_p99'] = float(np.percentile(arr, 99))
        summary['tick_time_max'] = float(np.max(arr))

    for sid, s in ship_series(data).items():
        summary[f'ship_{sid}_speed_final'] = float(s['speed'][-1])
        steps = np.hypot(np.diff(s['x']), np.diff(s['y']))
        summary[f'ship_{sid}_distance'] = float(np.sum(steps))

    errors = [e['error_px'] for e in data.get('prediction_error', [])]
    if errors:
        summary['prediction_error_mean'] = float(np.mean(errors))
        summary['prediction_error_p95'] = float(np.percentile(errors, 95))

    lags = [l['lag_px'] for l in data.get('interpolation_lag', [])]
    if lags:
        summary['interpolation_lag_mean'] = float(np.mean(lags))

    return summary


def analyze_all(path: str, output_dir: str = 'analysis',
                tick_rate: int = DEFAULT_TICK_RATE) -> dict:
    """Write every plot for one metrics file and print its summary."""
    print(f"[ANALYSIS] Reading {path}")
    data = load_metrics(path)

    plot_ship_motion(data, output_dir)
    plot_client_corrections(data, output_dir)
    plot_tick_budget(data, output_dir, tick_rate)

    summary = summarize(data)
    print(f"[ANALYSIS] {len(summary)} summary values:")
    for key in sorted(summary):
        print(f"    {key:<32} {summary[key]:10.3f}")
    return summary


if __name__ == '__main__':
    import argparse
    parser = argparse.ArgumentParser(description='Plot ship simulation metrics')
    parser.add_argument('path', help='Metrics JSON written by the server')
    parser.add_argument('--output', default='analysis',
                        help='Directory for the PNG files')
    parser.add_argument('--tick-rate', type=int, default=DEFAULT_TICK_RATE,
                        help='Server tick rate the run used (Hz)')
    args = parser.parse_args()
    analyze_all(args.path, args.output, args.tick_rate)
