from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional
from enum import Enum


class AuthType(str, Enum):
    API_KEY = "api_key"
    BEARER = "bearer"
    BASIC = "basic"
    NONE = "none"


@dataclass
class TestRecord:
    """One expected entity from `test_data` / `test_products`."""
    __test__ = False
    id: Any
    name: str
    price: Any

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "price": self.price}


@dataclass
class ClientConfig:
    client: str
    api: Dict[str, Any]
    authentication: Dict[str, Any] = field(default_factory=lambda: {"type": "none"})
    tests: List[str] = field(default_factory=list)
    test_data: List[TestRecord] = field(default_factory=list)
    notes: Optional[str] = None
    source: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def base_url(self) -> str:
        return self.api["base_url"]

    @property
    def auth_type(self) -> AuthType:
        return AuthType(self.authentication.get("type", "none"))


@dataclass
class TestResult:
    __test__ = False
    name: str
    passed: bool
    details: List[str] = field(default_factory=list)
    elapsed_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "passed": self.passed,
            "details": list(self.details),
            "elapsed_ms": round(self.elapsed_ms, 1),
        }


@dataclass
class RunReport:
    """Outcome of one run of a client's test list."""
    client: str
    base_url: str
    started_at: str
    finished_at: str = ""
    results: List[TestResult] = field(default_factory=list)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def failed(self) -> int:
        return len(self.results) - self.passed

    @property
    def total(self) -> int:
        return len(self.results)

    def failures(self) -> List[str]:
        lines = []
        for r in self.results:
            if r.passed:
                continue
            reason = "; ".join(r.details) if r.details else "failed"
            lines.append(f"{r.name}: {reason}")
        return lines
