"""Test package for the Noise Identification module.

Core tests drive the engine headlessly with a fake clock and a recording
host. The smoke tests run the pygame shell with SDL's dummy video/audio
drivers so no window opens. Run ``pytest`` from the project root.
"""
