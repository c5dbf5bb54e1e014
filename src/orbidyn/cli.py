"""
Command line entry point: propagate a single orbit and report a summary.

Examples:
  orbidyn-propagate                                  500 km, 45 deg, 90 min, Cartesian
  orbidyn-propagate --representation equinoctial --step 10
  orbidyn-propagate --config params.yaml --no-drag --output traj.csv
"""

import argparse
import logging
import sys

import numpy as np

from .config import config
from .parameters import PhysicalParameters, load_parameters
from .orbital_elements import OrbitalElements, StateType
from .propagator import Propagator
from .defaults import circular_orbit_initial_conditions
from .utils import Timer, KeplerConvergenceError

logger = logging.getLogger('orbidyn.cli')

# classical elements are singular at e = 0
_MIN_CLASSICAL_ECCENTRICITY = 1e-4


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='orbidyn-propagate',
        description='Propagate an Earth orbit with J2 and drag using fixed-step RK4',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split('Examples:', 1)[1],
    )
    parser.add_argument('--representation', default='cartesian',
                        choices=['cartesian', 'classical', 'equinoctial'],
                        help='State representation to integrate (default: cartesian)')
    parser.add_argument('--t_end', type=float, default=5400.0,
                        help='Final time [s] (default: 5400)')
    parser.add_argument('--step', type=float, default=None,
                        help=f'RK4 step [s] (default: {config.DEFAULT_STEP})')
    parser.add_argument('--altitude', type=float, default=500e3,
                        help='Initial altitude above the equatorial radius [m] (default: 500e3)')
    parser.add_argument('--inclination', type=float, default=45.0,
                        help='Inclination [deg] (default: 45)')
    parser.add_argument('--eccentricity', type=float, default=0.0,
                        help='Initial eccentricity, perigee at the altitude given (default: 0)')
    parser.add_argument('--config', type=str, default=None,
                        help='Path to a YAML file of physical parameters')
    parser.add_argument('--no-j2', action='store_true',
                        help='Disable the J2 perturbation')
    parser.add_argument('--no-drag', action='store_true',
                        help='Disable atmospheric drag')
    parser.add_argument('--output', type=str, default=None,
                        help='Write the trajectory to this CSV file')
    parser.add_argument('--verbose', action='store_true',
                        help='Enable debug logging')
    return parser


def initial_state(args, params: PhysicalParameters) -> OrbitalElements:
    """Initial orbit from the altitude, inclination and eccentricity options"""
    inc = np.radians(args.inclination)
    e = args.eccentricity
    if args.representation == 'classical' and e < _MIN_CLASSICAL_ECCENTRICITY:
        logger.warning("Classical elements are singular for circular orbits; "
                       "using e=%g", _MIN_CLASSICAL_ECCENTRICITY)
        e = _MIN_CLASSICAL_ECCENTRICITY
    if e == 0:
        return OrbitalElements(circular_orbit_initial_conditions(args.altitude, inc, params),
                               StateType.CARTESIAN, params=params)
    # perigee at the requested altitude
    a = (params.R + args.altitude) / (1 - e)
    return OrbitalElements(a=a, e=e, i=inc, omega=0.0, Omega=0.0, theta=0.0,
                           params=params)


def main(argv=None) -> int:
    """
    Main entry point. Parses command line arguments, propagates and
    logs a summary. Returns the process exit code.
    """
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    perturbations = tuple(p for p, off in (('J2', args.no_j2), ('drag', args.no_drag))
                          if not off)

    try:
        params = load_parameters(args.config) if args.config else PhysicalParameters()
        prop = Propagator(args.representation, params=params,
                          perturbations=perturbations, step=args.step)
        prop.summary()
        x0 = initial_state(args, params)
        with Timer("Propagation") as timer:
            traj = prop.propagate(x0, 0.0, args.t_end)
    except (ValueError, KeplerConvergenceError, OSError) as exc:
        # domain errors and bad parameter files are ValueErrors
        logger.error("Propagation failed: %s", exc)
        return 1

    cart = traj.convert_to(StateType.CARTESIAN).states
    alt0 = np.linalg.norm(cart[0, :3]) - params.R
    altf = np.linalg.norm(cart[-1, :3]) - params.R
    energy = traj.specific_energy(include_j2='J2' in perturbations)

    logger.info("Samples: %d over [%g, %g] s", len(traj), traj.t0, traj.tf)
    logger.info("Initial altitude: %.3f km", alt0 / 1e3)
    logger.info("Final altitude:   %.3f km", altf / 1e3)
    logger.info("Relative energy drift: %.3e",
                (energy[-1] - energy[0]) / abs(energy[0]))
    logger.info("Elapsed: %.3f s", timer.elapsed)

    if args.output:
        traj.to_dataframe().to_csv(args.output, index=False)
        logger.info("Trajectory written to %s", args.output)
    return 0


if __name__ == '__main__':
    sys.exit(main())
