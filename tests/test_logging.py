import logging

from tier_placement.core.placement import resolve_final_position
from tier_placement.utils.logging_helper import get_logger
from placement_helpers import answer, letters, new_state


def test_engine_loggers_have_no_handlers_of_their_own():
    state = answer(new_state(letters(5)), ("C", "better"), ("A", "better"))
    resolve_final_position(state)
    for module in ("selector", "applier", "resolver", "state"):
        logger = logging.getLogger(f"tier_placement.core.placement.{module}")
        assert logger.handlers == []
        assert logger.propagate


def test_get_logger_by_dotted_name(tmp_path):
    logger = get_logger(log_dir=tmp_path, name="tier_placement.testing.scratch")
    try:
        assert logger.name == "tier_placement.testing.scratch"
        assert (tmp_path / "scratch.log").exists()
        assert get_logger(name="tier_placement.testing.scratch") is logger
        assert not logger.propagate
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)


def test_get_logger_names_after_caller(tmp_path):
    logger = get_logger(log_dir=tmp_path)
    try:
        assert logger.name == "tier_placement.test_logging"
        assert (tmp_path / "test_logging.log").exists()
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
