"""
Ranked - competitive rating and match resolution engine

Responsibilities:
- Game namespaces and admin/player capabilities
- Per-game rating registry (one record per player)
- Per-game match registry and all-or-nothing match resolution
- Read API over ratings, matches and registry addresses
"""
