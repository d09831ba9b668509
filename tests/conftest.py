"""Pytest fixtures for offer selection, catalog and widget tests."""

import pytest

from factories import product_node, variant_node


@pytest.fixture
def sample_catalog():
    """Local catalog document with one collection and a generic listing."""
    return {
        "collections": {
            "summer": {
                "id": "gid://shop/Collection/1",
                "products": [
                    product_node("P1", variant_node("V1", stock=5), image_url="https://img/p1.png"),
                    product_node(
                        "P2",
                        variant_node("V2a", title="Small"),
                        variant_node("V2b", title="Large"),
                    ),
                ],
            },
            "empty": {"id": "gid://shop/Collection/2", "products": []},
        },
        "products": [
            product_node("G1", variant_node("GV1")),
            product_node("G2", variant_node("GV2", available=False)),
        ],
    }
