import copy
from itertools import product
from typing import Iterator, Dict, Any

import yaml

from fuelsim.station.parameters import ModelParameters, RunParameters


def load_config(path: str) -> Dict[str, Any]:
    with open(path, 'r', encoding='utf-8') as file:
        cfg = yaml.safe_load(file)
    return cfg or {}


def model_parameters(cfg: Dict[str, Any]) -> ModelParameters:
    model = cfg.get("model", {}) or {}
    if not isinstance(model, dict):
        raise TypeError("cfg['model'] must be a mapping of parameter -> value")
    return ModelParameters.from_config(model)


def run_parameters_iterator(cfg: Dict[str, Any]) -> Iterator[RunParameters]:
    run_params = cfg.get("run", {}) or {}
    if not isinstance(run_params, dict):
        raise TypeError("cfg['run'] must be a mapping of parameter -> value")

    variable_fields = run_params.get('variable_fields', [])
    fixed = {key: value for key, value in run_params.items() if key != 'variable_fields'}
    if variable_fields:
        parameter_list = [fixed[field_name] for field_name in variable_fields]
        for combo in product(*parameter_list):
            run_param_copy = copy.deepcopy(fixed)
            for i, field_name in enumerate(variable_fields):
                run_param_copy[field_name] = combo[i]
            yield RunParameters.from_config(run_param_copy)
    else:
        yield RunParameters.from_config(fixed)
