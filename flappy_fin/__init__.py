"""
Flappy Fin Package
==================

This package contains the core game logic, physics, progression, and
persistence systems for Flappy Fin. It controls:

- Avatar physics and obstacle scrolling
- Obstacle gap generation
- Collision and out-of-bounds termination
- Per-difficulty best scores and unlock gates
- Cosmetic (fin skin) selection

All tunable parameters are in game_config.yaml.
"""
