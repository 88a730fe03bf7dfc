import argparse
import logging
import sys

from core.exceptions import SurfaceEvolverError
from geometry.geom_io import (
    load_data,
    parse_geometry,
    resolve_geometry_path,
    save_geometry,
)
from geometry.primitives import MESH_BUILDERS, build_named_mesh
from parameters.global_parameters import (
    BUFFER_MODES,
    DEGENERACY_POLICIES,
    GlobalParameters,
)
from runtime.evolver import SurfaceEvolver
from runtime.logging_config import setup_logging
from runtime.recorder import RECORDABLE, IterationRecorder

logger = logging.getLogger("surface_evolver")


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Surface Evolver Simulation Driver")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("-i", "--input", help="Input mesh JSON/YAML file")
    source.add_argument(
        "-m",
        "--mesh",
        choices=sorted(MESH_BUILDERS),
        default=None,
        help="Use a built-in mesh instead of an input file (default: tetrahedron).",
    )
    parser.add_argument(
        "-n",
        "--subdivisions",
        type=int,
        default=0,
        help="Midpoint subdivision levels applied to a built-in mesh.",
    )
    parser.add_argument(
        "--iterations",
        type=int,
        default=None,
        help="Number of simulation steps (default: global parameter 'iterations').",
    )
    parser.add_argument(
        "--step-size", type=float, default=None, help="Override the step size lambda."
    )
    parser.add_argument(
        "--surface-tension",
        type=float,
        default=None,
        help="Override the surface tension sigma.",
    )
    parser.add_argument(
        "--buffer-mode",
        choices=BUFFER_MODES,
        default=None,
        help="Position buffer policy (in_place overwrites; double_buffered swaps).",
    )
    parser.add_argument(
        "--degeneracy-policy",
        choices=DEGENERACY_POLICIES,
        default=None,
        help="Zero degenerate contributions, or abort on them.",
    )
    parser.add_argument(
        "--record",
        default="SurfaceArea,Volume",
        help="Comma-separated quantities recorded per iteration: "
        + ", ".join(RECORDABLE),
    )
    parser.add_argument(
        "-o", "--output", default=None, help="Write per-iteration records to JSON"
    )
    parser.add_argument(
        "--save-mesh", default=None, help="Write the final geometry to a JSON file"
    )
    parser.add_argument(
        "--compact-output-json",
        action="store_true",
        help="Write output JSON in compact (single-line) form.",
    )
    parser.add_argument(
        "--properties",
        action="store_true",
        help="Print basic properties (area, volume, curvature) and exit",
    )
    parser.add_argument(
        "--viz",
        action="store_true",
        help="Show the surface after the run.",
    )
    parser.add_argument(
        "--viz-save",
        default=None,
        help="Save the visualization image to PATH instead of only showing it.",
    )
    parser.add_argument("--log", default=None, help="Optional log file")
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Suppress console output"
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable verbose debug logging"
    )
    return parser


def print_properties(evolver: SurfaceEvolver) -> None:
    props = evolver.get_properties()
    print("=== Surface Properties ===")
    print(f"Vertices : {evolver.mesh.n_vertices}")
    print(f"Triangles: {evolver.mesh.n_triangles}")
    print()
    print(f"Total surface area: {props['surface_area']:.6f}")
    print(f"Total volume      : {props['volume']:.6f}")
    print(f"Mean curvature    : {props['mean_curvature']:.6f}")
    print(f"Mean net force    : {props['mean_net_force']:.6f}")


def main(argv=None):
    parser = create_parser()
    args = parser.parse_args(argv)

    global logger
    logger = setup_logging(args.log, quiet=args.quiet, debug=args.debug)

    if args.input:
        try:
            path = resolve_geometry_path(args.input)
        except FileNotFoundError as exc:
            print(exc, file=sys.stderr)
            sys.exit(1)
        try:
            mesh, global_params = parse_geometry(load_data(path))
        except (ValueError, SurfaceEvolverError) as exc:
            logger.error("Cannot read %s: %s", path, exc)
            sys.exit(1)
        logger.info("Loaded %s", path)
    else:
        mesh = build_named_mesh(args.mesh or "tetrahedron", args.subdivisions)
        global_params = GlobalParameters()
        logger.info("Built %s mesh with %d subdivisions", mesh.name, args.subdivisions)

    overrides = {
        "step_size": args.step_size,
        "surface_tension": args.surface_tension,
        "buffer_mode": args.buffer_mode,
        "degeneracy_policy": args.degeneracy_policy,
        "iterations": args.iterations,
    }
    global_params.update({k: v for k, v in overrides.items() if v is not None})

    try:
        evolver = SurfaceEvolver(mesh, global_params)
    except SurfaceEvolverError as exc:
        logger.error("Cannot start simulation: %s", exc)
        sys.exit(1)

    if args.properties:
        try:
            evolver.evaluate_forces()
        except SurfaceEvolverError as exc:
            logger.error("Cannot evaluate forces: %s", exc)
            sys.exit(1)
        print_properties(evolver)
        return

    try:
        recorder = IterationRecorder(args.record)
    except ValueError as exc:
        print(exc, file=sys.stderr)
        sys.exit(1)

    iterations = int(global_params.get("iterations"))
    try:
        evolver.run(iterations, callback=recorder)
    except SurfaceEvolverError as exc:
        logger.error("Simulation aborted at step %d: %s", evolver.iteration + 1, exc)
        sys.exit(1)

    if args.output:
        recorder.write_json(args.output, compact=args.compact_output_json)
    if args.save_mesh:
        save_geometry(
            evolver.current_mesh(),
            args.save_mesh,
            global_params=global_params,
            compact=args.compact_output_json,
        )
        logger.info("Final geometry saved to %s", args.save_mesh)

    if args.viz or args.viz_save:
        import matplotlib.pyplot as plt

        from visualization.plotting import plot_mesh

        plot_mesh(
            evolver.positions,
            evolver.triangles,
            title=f"{mesh.name} after {evolver.iteration} steps",
            show=args.viz_save is None,
        )
        if args.viz_save:
            plt.gcf().savefig(args.viz_save, bbox_inches="tight")
            logger.info("Saved visualization to %s", args.viz_save)

    logger.info("Simulation complete.")


if __name__ == "__main__":
    main()
