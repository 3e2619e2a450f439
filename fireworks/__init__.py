"""
Fireworks
Particle firework simulation engine.

Features:
- Burst / ring / spray launch styles
- Drag, jitter and gravity with explicit Euler integration
- Ring-buffer motion trails (short or 50-sample persistent)
- Apex fizzle sub-bursts
- Capacity-bounded pool with oldest-first eviction
"""
