"""
MVVM Package - private-emit / public-subscribe event channels.

Provides:
- Emitter: write handle plus shared read-only Signal around one Subject.
- Signaling: descriptor declaring an Emitter/Signal pair on a ViewModel.
"""
from signaling.mvvm.signaling import Emitter, Signaling

__all__ = [
    "Emitter",
    "Signaling",
]
