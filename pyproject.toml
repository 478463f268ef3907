[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "boomgw"
version = "0.1.0"
description = "Core types, format conversion and audit helpers for an OpenAI/Anthropic-compatible LLM gateway"
requires-python = ">=3.10"
dependencies = []
keywords = ["llm", "gateway", "openai", "anthropic", "proxy", "sse"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: Proxy Servers",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest", "pytest-asyncio"]

[tool.hatch.build.targets.wheel]
packages = ["boomgw"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
