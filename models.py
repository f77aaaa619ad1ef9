"""
Pydantic models describing a lazy chain pipeline as data.

A pipeline is a source list, an ordered list of adapter operations and one
terminal operation. Callables are given as lambda source strings.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class OperationType(str, Enum):
    """Lazy adapter enumeration"""
    MAP = "map"
    FILTER = "filter"
    SKIP = "skip"
    TAKE = "take"
    CHAIN = "chain"
    CYCLE = "cycle"
    BATCH = "batch"


class TerminalType(str, Enum):
    """Terminal operation enumeration"""
    COLLECT = "collect"
    COUNT = "count"
    FOLD = "fold"
    ALL = "all"
    ANY = "any"
    SUM = "sum"
    FIRST = "first"


# Field each operation cannot do without
REQUIRED_FIELDS: Dict[OperationType, str] = {
    OperationType.MAP: "function",
    OperationType.FILTER: "predicate",
    OperationType.SKIP: "count",
    OperationType.TAKE: "count",
    OperationType.CHAIN: "items",
    OperationType.BATCH: "size",
}


class OperationSpec(BaseModel):
    """One adapter step of a pipeline"""
    type: OperationType = Field(
        ...,
        description="Adapter to apply"
    )
    function: Optional[str] = Field(
        None,
        description="Lambda source for map",
        examples=["lambda x: x * 2"]
    )
    predicate: Optional[str] = Field(
        None,
        description="Lambda source for filter",
        examples=["lambda x: x % 2 == 0"]
    )
    count: Optional[int] = Field(
        None,
        ge=0,
        description="Element count for skip and take"
    )
    size: Optional[int] = Field(
        None,
        ge=1,
        description="Batch size"
    )
    items: Optional[List[Any]] = Field(
        None,
        description="Elements appended by chain"
    )

    @field_validator('function', 'predicate')
    @classmethod
    def validate_lambda_source(cls, v):
        """Callable sources cannot be blank"""
        if v is not None and not v.strip():
            raise ValueError("Callable source cannot be empty")
        return v.strip() if v is not None else v

    @model_validator(mode='after')
    def check_required_field(self):
        required = REQUIRED_FIELDS.get(self.type)
        if required and getattr(self, required) is None:
            raise ValueError(f"'{self.type.value}' operation requires '{required}'")
        return self


class PipelineRequest(BaseModel):
    """Source data, adapters and terminal for one pipeline run"""
    data: List[Any] = Field(
        ...,
        description="Source elements"
    )
    operations: List[OperationSpec] = Field(
        default_factory=list,
        description="Adapters applied in order"
    )
    terminal: TerminalType = Field(
        TerminalType.COLLECT,
        description="Terminal operation that produces the result"
    )
    initial: Any = Field(
        None,
        description="Initial accumulator for fold, start value for sum"
    )
    combine: Optional[str] = Field(
        None,
        description="Lambda source (acc, item) -> acc for fold",
        examples=["lambda acc, x: acc + x"]
    )
    predicate: Optional[str] = Field(
        None,
        description="Lambda source for all/any; defaults to 'is True'"
    )
    limit: Optional[int] = Field(
        None,
        ge=0,
        description="Take at most this many elements before the terminal"
    )

    @model_validator(mode='after')
    def check_terminal(self):
        if self.terminal == TerminalType.FOLD and self.combine is None:
            raise ValueError("'fold' terminal requires 'combine'")
        # A filter on an endless stream can spin forever even under 'limit'
        endless = False
        for op in self.operations:
            if op.type == OperationType.CYCLE:
                endless = True
            elif op.type == OperationType.TAKE:
                endless = False
            elif op.type == OperationType.FILTER and endless:
                raise ValueError("'filter' after 'cycle' needs a 'take' in between")
        if endless and self.limit is None:
            raise ValueError("Pipelines containing 'cycle' require 'limit'")
        return self


class PerformanceInfo(BaseModel):
    """Timing and memory figures for a pipeline run"""
    processing_time_ms: float = Field(..., ge=0)
    memory_usage_mb: float = Field(..., ge=0, description="Peak traced allocation")
    rss_mb: float = Field(..., ge=0, description="Process resident set size after the run")
    input_size: int = Field(..., ge=0)
    output_size: Optional[int] = Field(None, description="Length of the result when it is a list")


class PipelineResponse(BaseModel):
    """Result of a pipeline run"""
    result: Any
    terminal: TerminalType
    operations_applied: List[str] = Field(default_factory=list)
    performance: PerformanceInfo
    timestamp: datetime = Field(default_factory=datetime.now)
