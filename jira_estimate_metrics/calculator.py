"""Calculator framework for Jira Estimate Metrics.

A calculator computes one result from the record source, the settings and the
results of calculators that ran before it. `run_calculators` runs a sequence
of calculators in order and then lets each one write its output files.
"""

import logging

logger = logging.getLogger(__name__)


class Calculator:
    """Base class for calculators."""

    def __init__(self, record_source, settings, results):
        """Initialise with the shared record source, settings dict and
        results dict. Results are keyed by calculator class.
        """
        self.record_source = record_source
        self.settings = settings
        self._results = results

    def get_result(self, calculator=None, default=None):
        """Get the result of `calculator`, or of this calculator if omitted."""
        return self._results.get(calculator or self.__class__, default)

    def run(self):
        """Compute and return the result of this calculator."""
        return None

    def write(self):
        """Write output files. The default implementation does nothing."""


def run_calculators(calculators, record_source, settings, write=True):
    """Run each calculator in `calculators` in order, then call `write()` on
    each unless `write` is false. Returns a dict of results keyed by
    calculator class.

    Errors raised from `run()` propagate; errors from `write()` are logged so
    that the remaining writers still get a chance to run.
    """
    results = {}
    instances = []

    for c in calculators:
        logger.info("%s running...", c.__name__)
        calculator = c(record_source, settings, results)
        results[c] = calculator.run()
        instances.append(calculator)
        logger.info("%s completed", c.__name__)

    if write:
        for calculator in instances:
            name = calculator.__class__.__name__
            logger.debug("Writing output files for %s", name)
            try:
                calculator.write()
            except (OSError, ValueError) as e:
                logger.exception(
                    "Writing file for %s failed with an error: %s. "
                    "Attempting to run subsequent writers regardless.",
                    name,
                    e,
                )

    return results
