# main.py
import pulumi

from azurenative import EventHubsResourceBuilder
from config import load_config
from normalizer import normalize
from outputs import project_outputs
from resource_graph import build_graph
from validator import validate


def main():
    config_file = pulumi.Config().get("configFile") or "config.yaml"

    # Everything up to the graph is checked before a single resource is registered.
    try:
        config = validate(normalize(load_config(config_file)))
    except Exception as e:
        pulumi.log.error(f"Invalid Event Hubs configuration in '{config_file}': {e}")
        raise

    graph = build_graph(config)
    pulumi.log.info(f"Namespace '{config.name}' expands to {len(graph)} resources")

    builder = EventHubsResourceBuilder(graph)
    try:
        provisioned = builder.build()
    except Exception as e:
        pulumi.log.error(f"Failed during resource build: {e}")
        raise

    for name, value in project_outputs(graph, provisioned).items():
        pulumi.export(name, value)


if __name__ == "__main__":
    main()
