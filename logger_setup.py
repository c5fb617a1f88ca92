# logger_setup.py

import logging
import os

LOGGER_NAME = "particle_emitter"


def setup_logging(config: dict, log_root: str = 'runs') -> str:
    """
    Configures the "particle_emitter" logger for one run of the demo.

    Log records go to stderr and to `<log_root>/<run_id>/simulation.log`.
    Only the application's own logger is touched, so Numba's compiler
    chatter on the root logger never reaches our handlers.

    Data Contract:
    - Inputs:
        - config (dict): Full configuration. Reads 'run_id' plus
          'logging.level' and 'logging.format'.
        - log_root (str): Parent directory for per-run folders.
    - Outputs: Path to the run's log file (str).
    - Side Effects:
        - Replaces any handlers already attached to the logger.
        - Creates the run folder if it is missing.
    """
    run_id = config['run_id']
    log_config = config['logging']

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_config['level'])
    logger.propagate = False

    run_dir = os.path.join(log_root, run_id)
    os.makedirs(run_dir, exist_ok=True)
    log_file = os.path.join(run_dir, 'simulation.log')

    formatter = logging.Formatter(log_config['format'])
    handlers = [logging.FileHandler(log_file), logging.StreamHandler()]

    # Re-running setup (e.g. from tests) must not double every line.
    for old in list(logger.handlers):
        old.close()
        logger.removeHandler(old)
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.info(f"Logging initialized. Run ID: {run_id}. Log file: {log_file}")
    return log_file
