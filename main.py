import argparse
import logging
import sys

from fuelsim.simulator.simulation_engine import SimulationEngine
from fuelsim.station.parameters import ModelParameters, RunParameters
from utils.config_iterator import load_config, model_parameters


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Fuel station simulation. Reads report interval, ending time, "
                    "pump count and four seeds from stdin, one per line."
    )
    parser.add_argument("--config", help="YAML file with a 'model' section of model constants")
    parser.add_argument("--summary", action="store_true", help="print an end-of-run summary")
    parser.add_argument("--verbose", action="store_true", help="log every event to stderr")
    return parser.parse_args(argv)


if __name__ == '__main__':
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    model = model_parameters(load_config(args.config)) if args.config else ModelParameters()
    run_parameters = RunParameters.from_lines(sys.stdin)
    print(run_parameters.banner())

    engine = SimulationEngine.from_parameters(run_parameters, model)
    engine.run()

    if args.summary:
        engine.statistics.print_summary(engine.current_time)
