[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "datasetmaker"
version = "0.1.0"
description = "Desktop tool for cropping labelled regions out of image folders to build classification datasets"
requires-python = ">=3.10"
keywords = ["dataset", "annotation", "labeling", "image classification", "cropping"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: X11 Applications",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Image Processing",
]
dependencies = [
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
datasetmaker = "datasetmaker.app:main"

[tool.hatch.build.targets.wheel]
packages = ["datasetmaker"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
