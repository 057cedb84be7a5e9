[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "joyhttp"
version = "0.1.0"
description = "Report joystick directions to an HTTP server, with a small callback-driven HTTP(S) client"
requires-python = ">=3.10"
dependencies = []
keywords = ["http", "https", "tls", "joystick", "client", "certificate"]
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
    "Topic :: Internet :: WWW/HTTP",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
joyhttp-joystick = "joyhttp.joystick:main"
joyhttp-verify = "joyhttp.verify:main"

[tool.hatch.build.targets.wheel]
packages = ["joyhttp"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]
