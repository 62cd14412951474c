# pipelines/simwire.py
from typing import Iterable, Iterator, Mapping, Optional

import numpy as np # type: ignore

from wiresim.core.config import SimWireConfig
from wiresim.core.datatypes import SimWireContext, Geometry, DetectorClocks, DetectorProperties, RawDigit
from wiresim.workflows.initialization import initialize
from wiresim.workflows.assembly import process

Event = Mapping[str, Mapping[int, np.ndarray]]

# ============================================================================
# EVENT-LEVEL PRODUCER
# ============================================================================

def produce(context: SimWireContext, event: Event, verbose: bool = True) -> list[RawDigit]:
    """
    Simulate the RawDigits of one event.

    Args:
        context: State from `initialize`
        event: Collections keyed by producer label; the collection named by
               `drift_e_module_label` maps channel -> charge trace
        verbose: Print per-event warnings

    Returns:
        RawDigits for every channel of the geometry
    """
    label = context.config.drift_e_module_label
    if label not in event:
        raise KeyError(f"Event has no charge collection labelled {label!r} "
                       f"(available: {sorted(event)})")
    return process(context, event[label], verbose=verbose)


# ============================================================================
# EVENT LOOP
# ============================================================================

def process_events(context: SimWireContext,
                   events: Iterable[Event],
                   print_every: int = 10,
                   verbose: bool = True) -> Iterator[list[RawDigit]]:
    """
    Yield the RawDigits of each event in turn, reusing an initialized context.

    Events are pulled lazily, so `events` may be a generator reading from disk.
    """
    if verbose:
        print("\n" + "="*60)
        print("SIMULATING EVENTS")
        print("="*60)

    for i, event in enumerate(events):
        if verbose and print_every and i % print_every == 0:
            print(f"Event {i}")
        yield produce(context, event, verbose=verbose)

    if verbose:
        print(f"\n✓ Simulated {context.n_events} event(s)")


# ============================================================================
# MAIN PIPELINE
# ============================================================================

def simulate_events(config: SimWireConfig,
                    geometry: Geometry,
                    clocks: DetectorClocks,
                    detprop: DetectorProperties,
                    events: Iterable[Event],
                    rng: Optional[np.random.Generator] = None,
                    print_every: int = 10,
                    verbose: bool = True) -> Iterator[list[RawDigit]]:
    """
    INIT once, then yield the RawDigits of each event in turn.

    Args:
        config: Simulation configuration
        geometry: Wire planes
        clocks: Sampling rate and trigger offset
        detprop: Drift velocity and readout window size
        events: Iterable of events (see `produce`)
        rng: Optional generator (ignored when config.seed is set)
        print_every: Progress line every this many events (0 disables)
        verbose: Print INIT summary and progress

    Yields:
        list[RawDigit] per event
    """
    context = initialize(config, geometry, clocks, detprop, rng=rng, verbose=verbose)
    yield from process_events(context, events, print_every=print_every, verbose=verbose)
