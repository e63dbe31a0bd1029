# tests/artifacts/test_compose.py
"""Testes do descritor docker-compose."""

import yaml

from atlas_deploy.artifacts.compose import render_docker_compose


def _doc(tree):
    return yaml.safe_load(render_docker_compose(tree))


def test_default_services(default_tree):
    doc = _doc(default_tree)
    assert list(doc["services"]) == ["app", "redis", "mongodb", "nginx", "prometheus", "grafana"]
    assert set(doc["volumes"]) == {"mongodb_data", "redis_data", "prometheus_data", "grafana_data"}
    assert doc["networks"]["icepaca-production"]["driver"] == "bridge"


def test_minimal_services_when_optional_features_disabled(tree_with):
    tree = tree_with(
        {
            "performance": {"caching": {"redis": {"enabled": False}}},
            "security": {"ssl": {"enabled": False}},
            "monitoring": {"metrics": {"enabled": False}},
        }
    )
    doc = _doc(tree)

    # mongodb é sempre incluído
    assert list(doc["services"]) == ["app", "mongodb"]
    assert list(doc["volumes"]) == ["mongodb_data"]
    assert doc["services"]["app"]["depends_on"] == ["mongodb"]


def test_app_deploy_section(tree_with):
    tree = tree_with(
        {
            "deployment": {
                "scaling": {
                    "horizontal": {"min_replicas": 2},
                    "vertical": {"resources": {"limits": {"cpu": "1", "memory": "2Gi"}}},
                }
            }
        }
    )
    deploy = _doc(tree)["services"]["app"]["deploy"]

    assert deploy["replicas"] == 2
    assert deploy["resources"]["limits"] == {"cpus": "1", "memory": "2Gi"}
    assert deploy["resources"]["reservations"] == {"cpus": "500m", "memory": "1Gi"}
    assert deploy["restart_policy"] == {"condition": "on-failure", "delay": "5s", "max_attempts": 3}


def test_app_healthcheck_uses_monitoring_intervals(tree_with):
    tree = tree_with({"monitoring": {"health_checks": {"interval": 45, "timeout": 7}}})
    health = _doc(tree)["services"]["app"]["healthcheck"]
    assert health["interval"] == "45s"
    assert health["timeout"] == "7s"


def test_app_environment_and_image(default_tree):
    app = _doc(default_tree)["services"]["app"]
    assert app["image"] == "${IMAGE_NAME:-icepaca-production}:${IMAGE_TAG:-latest}"
    assert "DOMAIN=icepaca.com" in app["environment"]
    assert "LOG_LEVEL=info" in app["environment"]
    assert app["ports"] == ["3000:3000"]


def test_mongodb_initial_database(default_tree):
    mongodb = _doc(default_tree)["services"]["mongodb"]
    assert "MONGO_INITDB_DATABASE=icepaca" in mongodb["environment"]
