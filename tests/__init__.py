"""Test package for DisasterPrep EDU.

Core engine tests drive time through a fake clock and never sleep. The UI
smoke tests run the pygame shell headlessly using SDL's dummy drivers. To run
these tests, execute ``pytest`` from the project root.
"""
