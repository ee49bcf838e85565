import copy
import functools
import json
import pickle
import time
from enum import Enum
from pathlib import PosixPath
from typing import Callable, Any, Type

import numpy as np
import scipy.sparse
import yaml


class AntibodyType(Enum):
    """Antigen families that an antibody can target."""
    CSP = 0
    MSP1 = 1
    PFEMP1_MINOR = 2
    PFEMP1_MAJOR = 3


def basic_sigmoid(threshold: float, variable: float) -> float:
    """Saturating response to a stimulation level.

    Equal to 0.5 when ``variable == threshold`` and approaches 1 as the
    stimulation grows. Non-positive stimulation gives no response.

    Args:
        threshold: Stimulation producing a half-maximal response.
        variable: Stimulation level.

    Returns:
        Response in [0, 1).
    """
    if variable <= 0:
        return 0.0
    return variable / (threshold + variable)


def total_time(cls: Type) -> float:
    """Return _total_time of the class."""
    return getattr(cls, "_total_time", 0)


def reset_total_time(cls: Type) -> None:
    """Reset _total_time of the class to 0."""
    cls._total_time = 0


def timing_decorator(method: Callable[..., Any]):
    """Decorator for getting total time spent in a function."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        if not hasattr(self.__class__, "_total_time"):
            self.__class__._total_time = 0
        start_time = time.perf_counter()
        result = method(self, *args, **kwargs)
        self.__class__._total_time += time.perf_counter() - start_time
        return result

    return wrapper


def compress(dictionary: dict, nonzero_threshold: float = 0.5) -> dict:
    """Turn arrays in a dictionary into sparse matrices.

    Only turns array into sparse matrix if the fraction of
    nonzero elements is less than ``nonzero_threshold``. Arrays are
    flattened and the shape is stored in the dictionary. Antigen counts
    are zero outside of exposure windows, so they usually end up sparse.

    Args:
        dictionary: Original dictionary of data.

    Returns:
        newdict: Dictionary containing data as sparse matrices.
    """
    newdict = copy.deepcopy(dictionary)
    for key, value in dictionary.items():
        if isinstance(value, np.ndarray) and value.size:
            if np.nonzero(value)[0].size / value.size < nonzero_threshold:
                newdict[key + "shape"] = value.shape
                newdict[key] = scipy.sparse.csr_matrix(value.reshape(1, -1))
        elif isinstance(value, dict):
            newdict[key] = compress(value, nonzero_threshold)
    return newdict


def expand(dictionary: dict) -> dict:
    """Expand a compressed dictionary.

    Flattened arrays are reshaped using the stored shape.

    Args:
        dictionary: Dictionary containing data as sparse matrices.

    Returns:
        newdict: Original dictionary of data.
    """
    newdict = copy.deepcopy(dictionary)
    for key, value in dictionary.items():
        if isinstance(value, scipy.sparse.csr_matrix):
            newdict[key] = np.reshape(value.toarray(), dictionary[key + "shape"])
            del newdict[key + "shape"]
        elif isinstance(value, dict):
            newdict[key] = expand(value)
    return newdict


def convert_numpy_objects(obj):
    """Convert numpy objects to Python-native types so that they
    are JSON serializable
    """
    if isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.floating):
        return float(obj)
    elif isinstance(obj, np.bool_):
        return bool(obj)
    elif isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, PosixPath):
        return str(obj)
    elif isinstance(obj, Enum):
        return obj.name
    elif isinstance(obj, dict):
        return {k: convert_numpy_objects(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [convert_numpy_objects(i) for i in obj]
    else:
        return obj


def convert_list_to_tuple(obj):
    """Turn nested lists (as read from json/yaml) into nested tuples."""
    if isinstance(obj, (list, tuple)):
        return tuple(convert_list_to_tuple(item) for item in obj)
    return obj


def write_pickle(data: Any, file: str) -> None:
    with open(file, "wb") as f:
        pickle.dump(data, f)


def read_pickle(file: str) -> Any:
    with open(file, "rb") as f:
        return pickle.load(f)


def write_json(data: Any, file: str) -> None:
    data_converted = convert_numpy_objects(data)
    with open(file, "w") as f:
        json.dump(data_converted, f, indent=2)


def write_yaml(data: dict, file: str) -> None:
    data_converted = convert_numpy_objects(data)
    with open(file, "w") as f:
        return yaml.dump(data_converted, f)


def read_json(file: str) -> Any:
    with open(file, "r") as f:
        return json.load(f)


def read_yaml(file) -> Any:
    with open(file, "r") as f:
        return yaml.safe_load(f)
