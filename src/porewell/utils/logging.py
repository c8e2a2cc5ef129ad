""" Logging functionality for porewell.

Logging of function timings is controlled by the configuration file porewell.cfg,
which should be placed in the current working directory (where the python script is
initiated). All logging-related information is located in a section in the cfg-file
with heading logging; see sample file below.

By default, timing is switched off. It can be turned on by setting the keyword
'active' to True.

To log only parts of the code, functions are classified as relevant for the following
(overlapping) categories

    all: Used to log all methods.
    assembly: Assembly of residuals and Jacobians.
    discretization: Construction of discrete operators.
    models: Flow and well equations, initialization.
    numerics: Linear and nonlinear solvers, time stepping.

Example logging section of porewell.cfg:

    [logging]
    # Activate logging. Without this, the rest of the section has no effect
    active: True
    # To only log specific sections, use e.g.
    sections: numerics
    # multiple sections are separated by commas:
    sections: models, discretization

Ordinary progress messages (time steps, Newton iterations) are emitted through the
module loggers ``logging.getLogger(__name__)`` and are configured by the caller in the
usual way.

"""
import functools
import inspect
import logging
import os
import time

import porewell as pw

__all__ = ["time_logger"]


config: dict = pw.config.get("logging", {})
raw_sections = config.get("sections", "all")
active_sections = [s.strip().lower() for s in raw_sections.split(",")]
logger_is_active = config.get("active", "false").strip().lower() == "true"
always_log = "all" in active_sections

t_logger = logging.getLogger("porewell.timer")
t_logger.setLevel(logging.INFO)

if logger_is_active and not t_logger.hasHandlers():
    # Write timings to file, only when timing is requested.
    time_handler = logging.FileHandler(config.get("file", "PorewellTimings.log"))
    time_handler.setLevel(logging.INFO)
    time_handler.setFormatter(logging.Formatter("%(message)s"))
    t_logger.addHandler(time_handler)

# Find where in the file path the directory 'porewell' is located.
# We will use this below to strip away the common parts of file names.
separator = os.sep
path_length = __file__.split(separator).index("porewell")


def time_logger(sections):
    """A decorator that measures elapsed time for a function.

    Parameters:
        sections: Categories the decorated function belongs to. Timing is logged if
            any of them is active.

    """

    # The double nested function is needed to allow decorators with arguments.
    def inner_func(func):
        @functools.wraps(func)
        def log_time(*args, **kwargs):
            if not logger_is_active:
                return func(*args, **kwargs)
            elif always_log or any(s in active_sections for s in sections):
                # Name of the file, relative to the package root
                fn = separator.join(
                    inspect.getfile(func).split(separator)[path_length + 1 :]
                )
                name = f"{func.__name__} in file {fn}."

                t_logger.log(level=logging.INFO, msg=f"Calling {name}")
                start_time = time.perf_counter()

                value = func(*args, **kwargs)

                run_time = time.perf_counter() - start_time
                t_logger.log(
                    level=logging.INFO,
                    msg=f"Finished {name} Elapsed time: {run_time:.8f} s",
                )
                return value
            else:
                return func(*args, **kwargs)

        return log_time

    return inner_func
