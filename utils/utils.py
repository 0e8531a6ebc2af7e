import networkx as nx
import time
import logging
import config
import os
import datetime

from config import LOG_PATH

# Graph files: one record per line, "v <id> <label>" or "e <u> <v> [label]".
# Lines starting with "#" are comments.


def timer(func):
    def wrapper(*args, **kwargs):
        start_time = time.time()
        result = func(*args, **kwargs)
        end_time = time.time()
        elapsed_time = end_time - start_time
        return result, elapsed_time
    return wrapper


def setup_logger(name, save_file=False):
    """Create a logger with the specified name."""
    # Create a logger
    logger = logging.getLogger(name)
    logger.setLevel(config.LOGGING_LEVEL)  # Set the minimum logging level

    if logger.handlers:
        return logger

    # Create console handler
    ch = logging.StreamHandler()
    ch.setLevel(config.LOGGING_LEVEL)

    # Create formatter
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # Add formatter to ch
    ch.setFormatter(formatter)

    # Add ch to logger
    logger.addHandler(ch)

    if save_file:
        os.makedirs(LOG_PATH, exist_ok=True)
        log_file_path = os.path.join(LOG_PATH, f"{datetime.datetime.now().strftime('%Y-%m-%d')}.log")
        fh = logging.FileHandler(log_file_path)
        fh.setLevel(config.LOGGING_LEVEL)
        fh.setFormatter(formatter)
        logger.addHandler(fh)

    return logger


def _parse_token(token: str):
    """Numbers become int or float, anything else stays a string."""
    try:
        return int(token)
    except ValueError:
        pass
    try:
        return float(token)
    except ValueError:
        return token


def read_graph(file_path: str, attribute: str = config.DEFAULT_ATTRIBUTE, directed: bool = False) -> nx.Graph:
    """
    Read a labeled graph from a file and generate a NetworkX graph.

    Parameters:
    - file_path (str): Path to the file containing the graph records.
    - attribute (str): Attribute key under which labels are stored.
    - directed (bool): Build a DiGraph instead of a Graph.

    Returns:
    - nx.Graph: Generated NetworkX graph, vertices in file order.
    """

    graph = nx.DiGraph() if directed else nx.Graph()

    with open(file_path, 'r', encoding='utf-8') as file:
        for line_no, line in enumerate(file, start=1):
            fields = line.split()
            if not fields or fields[0].startswith("#"):
                continue
            kind = fields[0].lower()
            if kind == "v" and len(fields) in (2, 3):
                node = _parse_token(fields[1])
                label = _parse_token(fields[2]) if len(fields) == 3 else None
                graph.add_node(node, **{attribute: label})
            elif kind == "e" and len(fields) in (3, 4):
                source, target = _parse_token(fields[1]), _parse_token(fields[2])
                label = _parse_token(fields[3]) if len(fields) == 4 else None
                graph.add_edge(source, target, **{attribute: label})
            else:
                raise ValueError(f"{file_path}:{line_no}: malformed graph record {line.strip()!r}")

    return graph


def save_graph(graph: nx.Graph, file_path: str, attribute: str = config.DEFAULT_ATTRIBUTE) -> None:
    """
    Save a labeled graph in the format read by ``read_graph``.

    Parameters:
    - graph (nx.Graph): The graph to be saved.
    - file_path (str): Path to the file where the graph will be saved.
    """

    with open(file_path, 'w', encoding='utf-8') as file_object:
        for node, data in graph.nodes(data=True):
            label = data.get(attribute)
            file_object.write(f"v\t{node}" + ("" if label is None else f"\t{label}") + "\n")
        for u, v, data in graph.edges(data=True):
            label = data.get(attribute)
            file_object.write(f"e\t{u}\t{v}" + ("" if label is None else f"\t{label}") + "\n")


def save_results(results, output_file_name=None):
    """Write a results DataFrame as CSV under RESULT_PATH and return its path."""
    os.makedirs(config.RESULT_PATH, exist_ok=True)
    if output_file_name is None:
        output_file_name = f"{datetime.datetime.now().strftime('%Y-%m-%d_%H-%M-%S')}.csv"
    else:
        output_file_name = f"{output_file_name}.csv"
    path = os.path.join(config.RESULT_PATH, output_file_name)
    results.to_csv(path, index=False)
    return path
