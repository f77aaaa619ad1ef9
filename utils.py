"""
Utility functions for lazy chains.

Builds chains from pipeline models, runs them and keeps a small ledger of
timing and memory figures.
"""

import gc
import logging
import os
import time
import tracemalloc
from typing import Any, Callable, Dict, List

import psutil

from lazychain import Chain
from models import (
    OperationSpec,
    OperationType,
    PerformanceInfo,
    PipelineRequest,
    PipelineResponse,
    TerminalType,
)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# Global performance tracking
_performance_metrics: Dict[str, Any] = {
    "operations": [],
    "total_time_ms": 0.0,
    "total_memory_mb": 0.0,
    "operation_count": 0
}


def compile_callable(source: str) -> Callable:
    """Evaluate lambda source into a callable"""
    func = eval(source)
    if not callable(func):
        raise ValueError(f"Expected a callable, got {type(func).__name__} from {source!r}")
    return func


def apply_operation(chain: Chain, op: OperationSpec) -> Chain:
    """Apply one adapter step to a chain"""
    if op.type == OperationType.MAP:
        return chain.map(compile_callable(op.function))
    elif op.type == OperationType.FILTER:
        return chain.filter(compile_callable(op.predicate))
    elif op.type == OperationType.SKIP:
        return chain.skip(op.count)
    elif op.type == OperationType.TAKE:
        return chain.take(op.count)
    elif op.type == OperationType.CHAIN:
        return chain.chain(op.items)
    elif op.type == OperationType.CYCLE:
        return chain.cycle()
    elif op.type == OperationType.BATCH:
        return chain.batch(op.size)
    raise ValueError(f"Unknown op: {op.type}")


def build_chain(data: List[Any], operations: List[OperationSpec]) -> Chain:
    """Apply a sequence of adapter steps to a chain over ``data``"""
    chain = Chain.from_collection(data)
    for op in operations:
        chain = apply_operation(chain, op)
    return chain


def run_terminal(chain: Chain, request: PipelineRequest) -> Any:
    terminal = request.terminal
    if terminal == TerminalType.COLLECT:
        return chain.collect()
    elif terminal == TerminalType.COUNT:
        return chain.count()
    elif terminal == TerminalType.FOLD:
        return chain.fold(request.initial, compile_callable(request.combine))
    elif terminal in (TerminalType.ALL, TerminalType.ANY):
        predicate = compile_callable(request.predicate) if request.predicate else None
        if terminal == TerminalType.ALL:
            return chain.all(predicate)
        return chain.any(predicate)
    elif terminal == TerminalType.SUM:
        return chain.sum(0 if request.initial is None else request.initial)
    elif terminal == TerminalType.FIRST:
        return chain.first()
    raise ValueError(f"Unknown terminal: {terminal}")


def run_pipeline(request: PipelineRequest) -> PipelineResponse:
    """Build, run and measure a pipeline. Errors are logged and re-raised."""
    operations_applied = [op.type.value for op in request.operations]

    owns_tracing = not tracemalloc.is_tracing()
    if owns_tracing:
        tracemalloc.start()
    gc.collect()
    start_time = time.perf_counter()

    try:
        chain = build_chain(request.data, request.operations)
        if request.limit is not None:
            chain = chain.take(request.limit)
        result = run_terminal(chain, request)
        _, peak = tracemalloc.get_traced_memory()
    except Exception as e:
        logger.error(f"Pipeline {operations_applied} -> {request.terminal.value} failed: {e}")
        raise
    finally:
        if owns_tracing:
            tracemalloc.stop()

    processing_time_ms = (time.perf_counter() - start_time) * 1000
    memory_mb = peak / 1024 / 1024
    _record_metrics(f"pipeline_{request.terminal.value}", processing_time_ms, memory_mb, True)

    logger.info(
        f"Pipeline {operations_applied} -> {request.terminal.value} "
        f"completed in {processing_time_ms:.2f}ms"
    )

    return PipelineResponse(
        result=result,
        terminal=request.terminal,
        operations_applied=operations_applied,
        performance=PerformanceInfo(
            processing_time_ms=processing_time_ms,
            memory_usage_mb=memory_mb,
            rss_mb=get_rss_mb(),
            input_size=len(request.data),
            output_size=len(result) if isinstance(result, list) else None,
        ),
    )


def get_rss_mb() -> float:
    """Resident set size of this process in MB"""
    return psutil.Process(os.getpid()).memory_info().rss / 1024 / 1024


def measure_performance(operation_name: str, func, *args, **kwargs) -> Dict[str, Any]:
    """Measure performance of a function call with memory tracking"""
    tracemalloc.start()
    gc.collect()
    start_time = time.perf_counter()

    try:
        result = func(*args, **kwargs)
        execution_time_ms = (time.perf_counter() - start_time) * 1000
        _, peak = tracemalloc.get_traced_memory()
        memory_mb = peak / 1024 / 1024

        performance_info = _record_metrics(operation_name, execution_time_ms, memory_mb, True)
        performance_info["result_size"] = len(result) if hasattr(result, "__len__") else None
        performance_info["rss_mb"] = get_rss_mb()
        return performance_info

    except Exception as e:
        execution_time_ms = (time.perf_counter() - start_time) * 1000
        _, peak = tracemalloc.get_traced_memory()
        performance_info = _record_metrics(operation_name, execution_time_ms, peak / 1024 / 1024, False)
        performance_info["error"] = str(e)
        logger.error(f"Error in {operation_name} after {execution_time_ms:.2f}ms: {e}")
        raise

    finally:
        tracemalloc.stop()


def _record_metrics(operation_name: str, time_ms: float, memory_mb: float, success: bool) -> Dict[str, Any]:
    performance_info = {
        "operation": operation_name,
        "execution_time_ms": time_ms,
        "memory_usage_mb": memory_mb,
        "success": success,
        "timestamp": time.time()
    }
    _performance_metrics["operations"].append(performance_info)
    _performance_metrics["total_time_ms"] += time_ms
    _performance_metrics["total_memory_mb"] += memory_mb
    _performance_metrics["operation_count"] += 1
    return performance_info


def get_performance_summary() -> Dict[str, Any]:
    """Get summary of all performance metrics"""
    count = _performance_metrics["operation_count"]
    if count == 0:
        return {
            "total_operations": 0,
            "total_time_ms": 0.0,
            "total_memory_mb": 0.0,
            "avg_time_ms": 0.0,
            "avg_memory_mb": 0.0
        }

    return {
        "total_operations": count,
        "total_time_ms": _performance_metrics["total_time_ms"],
        "total_memory_mb": _performance_metrics["total_memory_mb"],
        "avg_time_ms": _performance_metrics["total_time_ms"] / count,
        "avg_memory_mb": _performance_metrics["total_memory_mb"] / count
    }


def clear_performance_metrics():
    """Clear all performance metrics"""
    global _performance_metrics
    _performance_metrics = {
        "operations": [],
        "total_time_ms": 0.0,
        "total_memory_mb": 0.0,
        "operation_count": 0
    }
