from time import sleep, perf_counter
from lazychain import Chain


def expensive_transform(x, delay=0.01):
    # Simulate a costly step so laziness is visible
    print(f"  computing f({x}) ...")
    sleep(delay)
    return x * x


def main():
    print("\n--- Demo: laziness (no work until consumed) ---")
    pipeline = (
        Chain.from_collection(range(1, 10_000))
        .map(expensive_transform)
        .filter(lambda v: v % 2 == 0)
        .skip(3)
        .take(5)
    )

    print("Constructed pipeline. No output yet (nothing computed).")
    print("\nCollecting (should compute only what's needed for 5 items):")
    t0 = perf_counter()
    out = pipeline.collect()
    t1 = perf_counter()
    print(f"Result: {out}")
    print(f"Time: {t1 - t0:.2f}s\n")

    print("--- Demo: cycling a finite source ---")
    cycled = Chain.from_collection([1, 2]).cycle().take(5).collect()
    print(f"[1, 2] cycled, first five: {cycled}\n")

    print("--- Demo: chaining two sources ---")
    joined = Chain.from_collection([1, 2]).chain([3, 4]).collect()
    print(f"[1, 2] + [3, 4]: {joined}\n")

    print("--- Demo: folding ---")
    total = Chain.from_collection([1, 2, 3]).fold(10, lambda acc, x: acc + x)
    print(f"fold(10, +) over [1, 2, 3]: {total}")

    return {"lazy": out, "cycled": cycled, "joined": joined, "folded": total}


if __name__ == "__main__":
    main()
