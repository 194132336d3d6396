"""
Demo: sweep the number of pumps and compare profit.

Runs every RunParameters combination from configs/model.yaml, prints each
statistics table, then a one-line-per-run comparison.
"""

import io

from fuelsim.simulator.simulation_engine import SimulationEngine
from utils.config_iterator import load_config, model_parameters, run_parameters_iterator


def main():
    """Run the pump-count sweep."""
    cfg = load_config("./configs/model.yaml")
    model = model_parameters(cfg)

    results = []
    for run_parameters in run_parameters_iterator(cfg):
        print("\n" + "=" * 90)
        print(run_parameters.banner())
        print("=" * 90)

        table = io.StringIO()
        engine = SimulationEngine.from_parameters(run_parameters, model, stream=table)
        engine.run()
        print(table.getvalue(), end="")

        results.append((run_parameters.num_pumps, engine.statistics.get_summary(engine.current_time)))

    print("\n" + "=" * 90)
    print("PUMP COUNT COMPARISON")
    print("=" * 90)
    print("  Pumps   Served   Balked   Usage      Profit   Lost Profit")
    for num_pumps, summary in results:
        print(f"  {num_pumps:5d}  {summary['served']:7d}  {summary['balked']:7d}"
              f"  {summary['pump_usage']*100:5.1f}%  {summary['total_profit']:10.2f}"
              f"  {summary['lost_profit']:12.2f}")


if __name__ == '__main__':
    main()
