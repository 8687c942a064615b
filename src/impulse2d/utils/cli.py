import argparse


def build_parser():
    parser = argparse.ArgumentParser(description='Run a headless impulse2d simulation from a YAML preset')
    parser.add_argument('preset', type=str,
                        help='path to a preset YAML (see configs/)')
    parser.add_argument('--seed', type=int, default=1, metavar='N',
                        help='random seed for scene generation (default: 1)')
    parser.add_argument('--duration', type=float, default=10.0, metavar='S',
                        help='simulated seconds to run (default: 10.0)')
    parser.add_argument('--frame_rate', type=float, default=60.0, metavar='HZ',
                        help='host tick rate fed to the fixed-step driver (default: 60)')
    parser.add_argument(
        "--gravity",
        type=float,
        default=None,
        help="Override gravity strength in the downward (negative y) direction.",
    )
    parser.add_argument('--fixed_dt', type=float, default=None, metavar='S',
                        help='override seconds per physics step')
    parser.add_argument('--solver_iterations', type=int, default=None, metavar='N',
                        help='override velocity solver passes per step')
    parser.add_argument('--correction_percent', type=float, default=None, metavar='P',
                        help='override positional correction fraction')
    parser.add_argument('--slop', type=float, default=None, metavar='D',
                        help='override penetration allowance')
    parser.add_argument('--max_steps_per_tick', type=int, default=None, metavar='N',
                        help='override cap on physics steps per host tick')
    parser.add_argument('--log_interval', type=int, default=60, metavar='N',
                        help='log progress every N host ticks (default: 60, 0 disables)')
    parser.add_argument(
        "--log_level",
        type=str,
        default=None,
        help="logging level (default: LOG_LEVEL env var or INFO)",
    )
    return parser


'''
usage: python scripts/main.py configs/box_of_bodies.yaml --seed 42 --duration 5 \
    --frame_rate 144 --solver_iterations 8 --log_level DEBUG
'''
