"""
wiresim waveform module.

Pure per-trace operations: responses, transforms, noise, digitization, compression.
"""
