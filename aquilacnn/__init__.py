"""Layer-by-layer CNN inference: AlexNet, residual and batch-norm layers, ImageNet labels and file readers."""

__version__ = "0.1.0"