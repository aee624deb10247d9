"""
Image preprocessing for the screening API.

Includes magic-byte dispatch between the PNG and JPEG decoders and the
tensor transforms that shape a decoded image for the classifier.
"""
