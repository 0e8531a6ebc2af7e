import config
from utils.generator import ERGenerator
from utils.utils import read_graph, save_graph, save_results, setup_logger, timer
from utils.dissimilarity import delta, absolute_difference
from ged import BMF, SBMF, FourWeightBMF, NBMF, HGED, TWEC, SBMFConfig, FourWeightBMFConfig
import itertools
import os
import argparse
import numpy as np
import pandas as pd

logger = setup_logger(__name__)


def get_graphs(args):
    """
    Generates or reads graphs based on the provided arguments.

    :param args: The object containing arguments parsed from the command line.
    :return: A list of networkx.Graph objects.
    """
    if args.files:
        logger.info(f"Reading graphs from files: {args.files}")
        graphs = [read_graph(f) for f in args.files]
    else:
        generator = ERGenerator(args.n, args.k, num_labels=args.labels, seed=args.seed)
        logger.info(
            f"Generating {args.layers} labeled ER graphs (n={args.n}, k={args.k}, labels={args.labels})"
        )
        similarities = None if args.similarity is None else [args.similarity] * (args.layers - 1)
        graphs = generator.generate_networks(args.layers, similarities)
        if args.save:
            os.makedirs(config.GRAPH_PATH, exist_ok=True)
            for i, graph in enumerate(graphs):
                save_graph(graph, os.path.join(config.GRAPH_PATH, f"graph_{i}.txt"))

    return graphs


def build_engines(seed=None, edge_diss=absolute_difference):
    """
    Builds every available engine.

    Each entry maps a name to the engine computing that dissimilarity.
    """
    return {
        "BMF": BMF(vertex_diss=delta, edge_diss=edge_diss),
        "SBMF": SBMF(SBMFConfig(seed=seed), vertex_diss=delta, edge_diss=edge_diss),
        "4WBMF": FourWeightBMF(FourWeightBMFConfig(), vertex_diss=delta, edge_diss=edge_diss),
        "NBMF": NBMF(FourWeightBMFConfig(), vertex_diss=delta, edge_diss=edge_diss),
        "HGED": HGED(vertex_diss=delta, edge_diss=edge_diss),
        "TWEC": TWEC(vertex_diss=delta, edge_diss=edge_diss),
    }


def run_algorithms(graphs, algorithms_to_run, seed=None, edge_diss=absolute_difference):
    """
    Runs a series of dissimilarity engines on every pair of graphs.

    :param graphs: A list of networkx.Graph objects.
    :param algorithms_to_run: A list of algorithm names to run.
    :return: The results DataFrame.
    """
    available_algorithms = build_engines(seed, edge_diss)
    pairs = list(itertools.combinations(range(len(graphs)), 2))
    logger.info(f"Comparing {len(pairs)} graph pairs")

    results = []
    for name in algorithms_to_run:
        if name not in available_algorithms:
            logger.warning(f"Algorithm '{name}' not found, skipping.")
            continue

        engine = available_algorithms[name]
        timed_decompose = timer(engine.decompose)

        logger.info(f"================ Running {name} ================")
        values, vertex_costs, edge_costs, execution_time = [], [], [], 0.0
        for i, j in pairs:
            result, elapsed = timed_decompose(graphs[i], graphs[j])
            values.append(result.total)
            vertex_costs.append(result.vertex_cost)
            edge_costs.append(result.edge_cost)
            execution_time += elapsed

        logger.info(f"Mean dissimilarity: {np.mean(values) if values else 0.0:.4f}")
        logger.info(f"Execution time: {execution_time:.3f} seconds")

        results.append(
            {
                "Algorithm": name,
                "Mean Diss": round(float(np.mean(values)), 4) if values else 0.0,
                "Mean Vertex Cost": round(float(np.mean(vertex_costs)), 4) if values else 0.0,
                "Mean Edge Cost": round(float(np.mean(edge_costs)), 4) if values else 0.0,
                "Time (s)": round(execution_time, 3),
            }
        )

    return pd.DataFrame(results)


def plot_first_pair(graphs):
    from utils.plot import visualize_assignment, save_figure
    from matching import optimal_assignment

    g1, g2 = graphs[0], graphs[1]
    assignment, _ = optimal_assignment(g1, g2, delta)
    fig = visualize_assignment(g1, g2, assignment)
    path = save_figure(fig)
    logger.info(f"Assignment figure saved to {path}")


def main():
    """
    Main function: parses command-line arguments, runs experiments, and prints results.
    """
    parser = argparse.ArgumentParser(
        description="Compare labeled graphs with graph edit distance heuristics.",
        formatter_class=argparse.RawTextHelpFormatter,
    )

    # Graph parameters
    parser.add_argument(
        "-n", type=int, default=20, help="Number of vertices of each generated graph."
    )
    parser.add_argument(
        "-k", type=float, default=3.0, help="Average degree for graph generation."
    )
    parser.add_argument(
        "--labels", type=int, default=4, help="Number of distinct vertex labels."
    )
    parser.add_argument(
        "--layers", type=int, default=2, help="Number of graphs to generate."
    )
    parser.add_argument(
        "--similarity",
        type=float,
        default=None,
        help="Generate graphs 2..layers as distorted copies of the first one\nwith this similarity in [0, 1].",
    )
    parser.add_argument(
        "--seed", type=int, default=None, help="Random seed for generation and sBMF shuffles."
    )
    parser.add_argument(
        "--files",
        nargs="+",
        help="List of graph file paths to read (overrides graph generation).\nExample: --files assets/graph/a.txt assets/graph/b.txt",
    )
    parser.add_argument(
        "--save", action="store_true", help="Save the generated graphs under assets/graph and the results under assets/result."
    )
    parser.add_argument(
        "--plot", action="store_true", help="Draw the optimal assignment of the first two graphs."
    )

    # Algorithm selection
    parser.add_argument(
        "--algos",
        nargs="+",
        default=["BMF", "SBMF", "4WBMF", "NBMF", "HGED", "TWEC"],
        help='List of algorithms to run.\nAvailable: BMF, SBMF, 4WBMF, NBMF, HGED, TWEC.\nExample: --algos BMF HGED',
    )

    args = parser.parse_args()

    try:
        # 1. Get graphs
        graphs = get_graphs(args)
        if len(graphs) < 2:
            raise ValueError("At least two graphs are required.")

        # 2. Run algorithms
        # Labels read from files are not necessarily numeric
        edge_diss = delta if args.files else absolute_difference
        results_df = run_algorithms(
            graphs, [algo.upper() for algo in args.algos], seed=args.seed, edge_diss=edge_diss
        )

        # 3. Display results
        print("\n================ Experiment Results ================")
        print(results_df.to_string(index=False))
        print("=" * 40)

        if args.save:
            logger.info(f"Results saved to {save_results(results_df)}")

        if args.plot:
            plot_first_pair(graphs)

    except (ValueError, FileNotFoundError) as e:
        logger.error(f"An error occurred: {e}")


if __name__ == "__main__":
    main()
