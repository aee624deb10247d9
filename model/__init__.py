"""
Model package for the cancer screening API.

Holds the model handle, the decode -> preprocess -> infer -> classify
pipeline, and the loader that fetches the pretrained classifier at startup.
"""
