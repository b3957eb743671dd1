"""
ALGORITHM EVALUATION
Compares every fusion strategy on the bundled ONCE-style scenes.
"""

import sys
from pathlib import Path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import pandas as pd

from dataset.once_loader import OnceDatasetLoader
from dataset.synthetic import realistic_camera_reading
from evaluation.evaluator import AlgorithmEvaluator
from perception.algorithm_selector import ALGORITHM_REGISTRY, create_algorithm
from perception.log_utils import configure_logging
from security.security_validator import SecurityValidator


def build_frames(scene_dir: Path):
    """One LiDAR + camera frame per annotated scene"""
    loader = OnceDatasetLoader(SecurityValidator())
    frames = []
    for annotation in loader.load_directory(scene_dir):
        lidar = loader.build_lidar_reading(annotation)
        camera = realistic_camera_reading(f"ONCE-CAM-{annotation.scene_id}",
                                          timestamp=annotation.timestamp + 20,
                                          width=640, height=360, seed=1)
        frames.append([lidar, camera])
    return frames


def main():
    configure_logging("WARNING")

    print("="*70)
    print(" FUSION ALGORITHM EVALUATION")
    print("="*70)

    scene_dir = project_root / "data" / "scenes"
    output_dir = project_root / "results" / "algorithm_evaluation"
    output_dir.mkdir(parents=True, exist_ok=True)

    frames = build_frames(scene_dir)
    print(f"\nLoaded {len(frames)} frames from {scene_dir}")

    evaluator = AlgorithmEvaluator(seed=7)
    algorithms = [create_algorithm(key) for key in ALGORITHM_REGISTRY]
    all_results = evaluator.compare(algorithms, frames)

    # Summary table
    summary_data = []
    for name, metrics in all_results.items():
        summary_data.append({
            'Algorithm': name,
            'Frames': metrics.frames,
            'Success': f"{metrics.success_rate:.0%}",
            'Fusion Conf': f"{metrics.avg_fusion_confidence:.3f}",
            'Objects/Frame': f"{metrics.avg_objects_per_frame:.1f}",
            'Obj Conf': f"{metrics.avg_object_confidence:.3f}",
            'Avg ms': f"{metrics.avg_processing_time_ms:.1f}",
        })

    df = pd.DataFrame(summary_data)
    print("\n" + df.to_string(index=False))

    csv_path = output_dir / "algorithm_summary.csv"
    df.to_csv(csv_path, index=False)
    print(f"\n✓ Summary table saved: {csv_path}")

    # Comparison plot
    names = list(all_results.keys())
    colors = ['#3498db', '#e74c3c', '#2ecc71', '#f39c12']

    fig, axes = plt.subplots(1, 2, figsize=(14, 5))
    axes[0].bar(names, [all_results[n].avg_fusion_confidence for n in names],
                color=colors, alpha=0.7)
    axes[0].set_title("Average Fusion Confidence")
    axes[0].grid(True, alpha=0.3, axis='y')

    data_points = [0, 10_000, 25_000, 50_000, 100_000, 200_000]
    for name, color in zip(names, colors):
        means = evaluator.detection_scaling(
            data_points, all_results[name].avg_fusion_confidence, trials=20
        )
        axes[1].plot(data_points, means, marker='o', color=color, label=name)
    axes[1].set_title("Detected Objects vs Fused Data Points")
    axes[1].set_xlabel("Total data points")
    axes[1].set_ylabel("Mean objects detected")
    axes[1].grid(True, alpha=0.3)
    axes[1].legend()

    for ax in axes[:1]:
        plt.setp(ax.xaxis.get_majorticklabels(), rotation=15, ha='right')

    plot_path = output_dir / "algorithm_comparison.png"
    plt.tight_layout()
    plt.savefig(plot_path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    print(f"✓ Comparison plot saved: {plot_path}")

    print(f"\n{'='*70}")
    print("✓ EVALUATION COMPLETE!")
    print(f"{'='*70}\n")


if __name__ == "__main__":
    main()
