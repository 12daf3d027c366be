from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional


SUCCESS = "success"
ERROR = "error"


@dataclass
class ParsedTable:
    headers: List[str] = field(default_factory=list)
    rows: List[Dict[str, str]] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def to_dict(self) -> Dict:
        return {"headers": list(self.headers), "data": [dict(r) for r in self.rows], "rowCount": self.row_count}


@dataclass(frozen=True)
class DiscountResult:
    row: int
    customer: str
    status: str
    message: str
    discount_code: Optional[str] = None
    amount: Optional[float] = None

    @property
    def ok(self) -> bool:
        return self.status == SUCCESS

    @classmethod
    def success(cls, row: int, customer: str, code: str, amount: float) -> "DiscountResult":
        return cls(
            row=row,
            customer=customer,
            status=SUCCESS,
            message="Discount code created successfully",
            discount_code=code,
            amount=amount,
        )

    @classmethod
    def failure(cls, row: int, customer: str, message: str) -> "DiscountResult":
        return cls(row=row, customer=customer, status=ERROR, message=message)

    def to_dict(self) -> Dict:
        out: Dict[str, object] = {"row": self.row, "customer": self.customer, "status": self.status}
        if self.discount_code is not None:
            out["discountCode"] = self.discount_code
        if self.amount is not None:
            out["amount"] = self.amount
        out["message"] = self.message
        return out

    @classmethod
    def from_dict(cls, data: Dict) -> "DiscountResult":
        amount = data.get("amount")
        return cls(
            row=int(data["row"]),
            customer=str(data.get("customer") or ""),
            status=str(data.get("status") or ERROR),
            message=str(data.get("message") or ""),
            discount_code=data.get("discountCode") or None,
            amount=float(amount) if amount not in (None, "") else None,
        )


@dataclass(frozen=True)
class GenerationSummary:
    total: int
    successful: int
    errors: int

    def to_dict(self) -> Dict[str, int]:
        return {"total": self.total, "successful": self.successful, "errors": self.errors}


@dataclass
class GenerationReport:
    results: List[DiscountResult] = field(default_factory=list)

    @property
    def summary(self) -> GenerationSummary:
        successful = sum(1 for r in self.results if r.ok)
        return GenerationSummary(
            total=len(self.results),
            successful=successful,
            errors=len(self.results) - successful,
        )

    def to_dict(self) -> Dict:
        return {
            "results": [r.to_dict() for r in self.results],
            "summary": self.summary.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "GenerationReport":
        # summary is derived, whatever the caller sent back is ignored
        return cls(results=[DiscountResult.from_dict(r) for r in (data.get("results") or [])])
