from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ModelAttempt:
    model: str
    index: int
    success: bool
    latency_ms: float
    error: Optional[str] = None
    rate_limited: bool = False

    @property
    def is_fallback(self) -> bool:
        return self.index > 0

    def to_event(self) -> dict:
        return {
            "model": self.model,
            "attempt_index": self.index,
            "is_fallback": self.is_fallback,
            "success": self.success,
            "latency_ms": round(self.latency_ms, 1),
            "error": self.error,
            "rate_limited": self.rate_limited,
        }
