[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "aquilacnn"
version = "0.1.0"
description = "A small CNN inference engine: layer-by-layer forward propagation, an AlexNet builder and residual-block building blocks"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["cnn", "inference", "neural-network", "alexnet", "imagenet", "mnist"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
aquilacnn = "aquilacnn.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["aquilacnn"]

[tool.pytest.ini_options]
addopts = "-ra"
