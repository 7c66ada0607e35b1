[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "chalkraw"
version = "0.25.5"
description = "Photo catalog, non-destructive edit model and image decoding for a raw photo developer"
requires-python = ">=3.10"
keywords = ["photography", "raw", "catalog", "demosaic", "image", "editing", "thumbnail"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics",
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
]
dependencies = [
    "numpy",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
chalkraw-gen-fixture = "chalkraw.imaging.fixture:main"

[tool.hatch.build.targets.wheel]
packages = ["chalkraw"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
ignore_missing_imports = true
