"""Shared fixtures: a small project graph and trains built on it."""

import pytest

from releasetrain.common import http_client
from releasetrain.constants import Constants
from releasetrain.model import Calver, Module, ProjectGraph, Train


@pytest.fixture
def graph():
    """build <- commons <- (jpa, mongodb) <- bom."""
    return ProjectGraph.from_edges({
        "build": [],
        "commons": ["build"],
        "jpa": ["commons"],
        "mongodb": ["commons"],
        "bom": ["jpa", "mongodb"],
    })


@pytest.fixture
def modules(graph):
    return (
        Module(graph.by_name("mongodb"), "1.9"),
        Module(graph.by_name("jpa"), "1.10"),
        Module(graph.by_name("commons"), "1.2"),
        Module(graph.by_name("build"), "1.8"),
    )


@pytest.fixture
def train(graph, modules):
    """Name-versioned train with modules declared out of dependency order."""
    return Train("Hopper", modules, graph=graph, parent=graph.by_name("build"))


@pytest.fixture
def calver_train(graph, modules):
    return Train("2020", modules, calver=Calver(2020), graph=graph, parent=graph.by_name("build"))


@pytest.fixture(autouse=True)
def fast_http(monkeypatch):
    """No backoff sleeps and a clean response cache for every test."""
    monkeypatch.setattr(Constants, "HTTP_RETRY_BASE_DELAY_SEC", 0)
    http_client.clear_cache()
    yield
    http_client.clear_cache()
