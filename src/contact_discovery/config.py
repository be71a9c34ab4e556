"""Runtime configuration model."""

from __future__ import annotations

from dataclasses import dataclass

from .validation import validate_runtime_constraints

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0 Safari/537.36 ContactDiscovery/1.0"
)
DEFAULT_OUTPUT_DIR = "results"
DEFAULT_POOL_SIZE = 20
DEFAULT_CONCURRENT_WEBSITES = 1
DEFAULT_CONCURRENT_SUBLINKS = 20
DEFAULT_NAVIGATION_TIMEOUT = 30.0
DEFAULT_DOM_READY_TIMEOUT = 5.0
DEFAULT_POOL_ACQUIRE_TIMEOUT = 10.0
DEFAULT_ENGINE = "selenium"
SUPPORTED_ENGINES = ("selenium", "requests")


@dataclass(frozen=True)
class CrawlConfig:
    """Validated configuration used by the discovery pipeline."""

    seeds: tuple[str, ...]
    output_dir: str = DEFAULT_OUTPUT_DIR
    pool_size: int = DEFAULT_POOL_SIZE
    concurrent_websites: int = DEFAULT_CONCURRENT_WEBSITES
    concurrent_sublinks: int = DEFAULT_CONCURRENT_SUBLINKS
    navigation_timeout: float = DEFAULT_NAVIGATION_TIMEOUT
    dom_ready_timeout: float = DEFAULT_DOM_READY_TIMEOUT
    pool_acquire_timeout: float = DEFAULT_POOL_ACQUIRE_TIMEOUT
    engine: str = DEFAULT_ENGINE
    user_agent: str = DEFAULT_USER_AGENT
    show_progress: bool = True
    check_mx: bool = False

    def __post_init__(self) -> None:
        validate_runtime_constraints(
            seeds=self.seeds,
            pool_size=self.pool_size,
            concurrent_websites=self.concurrent_websites,
            concurrent_sublinks=self.concurrent_sublinks,
            navigation_timeout=self.navigation_timeout,
            dom_ready_timeout=self.dom_ready_timeout,
            pool_acquire_timeout=self.pool_acquire_timeout,
            engine=self.engine,
            supported_engines=SUPPORTED_ENGINES,
        )
