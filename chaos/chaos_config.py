import random
import threading
import time
from collections import defaultdict
from typing import Iterable, Optional
from .exceptions.chaos_exception import ChaosException

class ChaosConfig:

    """
    Configuration class for the Chaos library.
    This class allows you to set parameters for enabling chaos, such as failure rates,
    delay chances, and maximum delays, and to force failures at named contexts.
    It also collects runtime metrics for observability.
    """

    """Initializes the ChaosConfig with default or specified parameters.
    Args:
        enabled (bool): Whether to enable chaos. Defaults to False.
        failure_rate (float): Probability of a failure occurring. Defaults to 0.1.
        delay_chance (float): Probability of a delay occurring. Defaults to 0.2.
        max_delay (float): Maximum delay time in seconds. Defaults to 2.0.
        fail_on (Iterable[str]): Contexts that always fail while chaos is enabled.
        seed (int): Seed for the random generator, for reproducible runs.
    """
    def __init__(
            self,
            enabled: bool = False,
            failure_rate: float = 0.1,
            delay_chance: float = 0.2,
            max_delay: float = 2.0,
            fail_on: Optional[Iterable[str]] = None,
            seed: Optional[int] = None
    ):
        self.enabled = enabled
        self.failure_rate = failure_rate
        self.delay_chance = delay_chance
        self.max_delay = max_delay
        self.fail_on = set(fail_on or ())
        self.random = random.Random(seed)
        self.lock = threading.Lock()

        # Chaos metrics
        self.total_operations = 0
        self.failures_injected = 0
        self.delays_injected = 0
        self.total_delay_time = 0.0
        self.failures_by_context = defaultdict(int)
        self.delays_by_context = defaultdict(int)

    """
    Injects a failure if chaos is enabled and either the context is listed in
    fail_on or the random chance meets the failure rate.
    Args:
        context (str): The context in which the failure is being injected, for logging purposes.
    Raises ChaosException: If a failure is injected.
    """
    def maybe_fail(self, context):
        with self.lock:
            self.total_operations += 1
            if not self.enabled:
                return
            if context not in self.fail_on and self.random.random() >= self.failure_rate:
                return
            self.failures_injected += 1
            self.failures_by_context[context] += 1
        print(f"[CHAOS] Injected failure in {context}")
        raise ChaosException(f"Chaos failure occurred during {context}.", context)

    """
    Randomly introduces a delay if chaos is enabled and the random chance meets the delay chance.
    This is done by sleeping for a random duration up to the maximum delay.
    Args:
        context (str): The context in which the delay is being injected, for logging purposes.
    """
    def maybe_delay(self, context):
        with self.lock:
            if not self.enabled or self.random.random() >= self.delay_chance:
                return
            delay = self.random.uniform(0, self.max_delay)
            self.delays_injected += 1
            self.delays_by_context[context] += 1
            self.total_delay_time += delay
        print(f"[CHAOS] Injected delay of {delay:.2f} seconds in {context}")
        time.sleep(delay)

    """
    Returns collected metrics for chaos execution, such as total operations,
    failures injected, delays introduced, and per-context statistics.
    """
    def get_metrics(self):
        with self.lock:
            return {
                "Summary": {
                    "total_operations": self.total_operations,
                    "failures_injected": self.failures_injected,
                    "delays_injected": self.delays_injected,
                    "total_delay_time": round(self.total_delay_time, 2),
                },
                "Failures by Context": dict(self.failures_by_context),
                "Delays by Context": dict(self.delays_by_context),
            }

    def print_metrics(self):
        metrics = self.get_metrics()

        print("\n=== Chaos Metrics Summary ===")
        for key, value in metrics["Summary"].items():
            print(f"{key.replace('_', ' ').capitalize()}: {value}")

        print("\n--- Failures by Context ---")
        if metrics["Failures by Context"]:
            for context, count in metrics["Failures by Context"].items():
                print(f"{context}: {count}")
        else:
            print("No failures recorded.")

        print("\n--- Delays by Context ---")
        if metrics["Delays by Context"]:
            for context, count in metrics["Delays by Context"].items():
                print(f"{context}: {count}")
        else:
            print("No delays recorded.")
        print("===========================\n")
