import networkx as nx
import matplotlib.pyplot as plt
import datetime
import config
import os


def get_node_positions(graph: nx.Graph, method: str = None, offset: tuple = (0.0, 0.0)):
    """
    Compute node positions for visualization based on the specified method.

    Parameters:
    - graph (nx.Graph): The graph for which node positions are computed.
    - method (str): "circular" for a circle, anything else for a spring layout.
    - offset (tuple): Translation applied to every position.

    Returns:
    - pos (dict): A dictionary of node positions.
    """
    if method == "circular":
        pos = nx.circular_layout(graph)
    else:
        pos = nx.spring_layout(graph, seed=0)
    return {node: (x + offset[0], y + offset[1]) for node, (x, y) in pos.items()}


def save_figure(fig, name: str = None):
    """Save a figure under TEMP_PATH/fig and return its path."""
    os.makedirs(os.path.join(config.TEMP_PATH, "fig"), exist_ok=True)
    if name is None:
        name = datetime.datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    path = os.path.join(config.TEMP_PATH, "fig", f"{name}.png")
    fig.savefig(path)
    return path


def visualize_assignment(g1: nx.Graph, g2: nx.Graph, assignment: dict, method: str = None,
                         attribute: str = config.DEFAULT_ATTRIBUTE, ax=None):
    """
    Draw two graphs side by side with dashed lines joining the matched vertices.

    Parameters:
    - g1 (nx.Graph): First graph, drawn on the left.
    - g2 (nx.Graph): Second graph, drawn on the right.
    - assignment (dict): Vertex of g1 -> vertex of g2.
    - method (str): Layout method, see get_node_positions.
    - attribute (str): Vertex attribute shown as node label.
    - ax: Matplotlib axes to draw on; a new figure is created when None.

    Returns:
    - fig: The matplotlib figure.
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 5))
    else:
        fig = ax.figure

    pos_1 = get_node_positions(g1, method, offset=(-1.5, 0.0))
    pos_2 = get_node_positions(g2, method, offset=(1.5, 0.0))

    # Relabel to keep the two vertex sets apart in a single drawing
    left = nx.relabel_nodes(g1, {node: ("g1", node) for node in g1.nodes})
    right = nx.relabel_nodes(g2, {node: ("g2", node) for node in g2.nodes})
    pos = {("g1", node): p for node, p in pos_1.items()}
    pos.update({("g2", node): p for node, p in pos_2.items()})

    labels = {("g1", node): data.get(attribute) for node, data in g1.nodes(data=True)}
    labels.update({("g2", node): data.get(attribute) for node, data in g2.nodes(data=True)})

    nx.draw(left, pos, ax=ax, node_color="skyblue", width=2)
    nx.draw(right, pos, ax=ax, node_color="lightgreen", width=2)
    nx.draw_networkx_labels(nx.compose(left, right), pos, labels=labels, ax=ax)

    # Highlight the assignment in red
    for u, v in assignment.items():
        (x1, y1), (x2, y2) = pos[("g1", u)], pos[("g2", v)]
        ax.plot([x1, x2], [y1, y2], linestyle="--", color="red", linewidth=1)

    unmatched = [("g1", node) for node in g1.nodes if node not in assignment]
    matched_2 = set(assignment.values())
    unmatched += [("g2", node) for node in g2.nodes if node not in matched_2]
    if unmatched:
        nx.draw_networkx_nodes(nx.compose(left, right), pos, nodelist=unmatched, node_color="red", ax=ax)

    ax.set_title("Vertex assignment")
    return fig
