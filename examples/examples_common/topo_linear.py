from qnls import SimulationConfig
from qnls.network import RequestSpec, SwapOrder, Topo, TopoQLink, TopoQNode


def build_linear_config(
    *,
    nodes: int | list[str],
    capacity: int | list[int] = 2,
    decay_rate: float = 0.0,
    swap_prob: float = 0.5,
    loss_prob: float | list[float] = 0.9,
    base_fidelity: float | list[float] = 0.99,
    attempt_interval: float = 1e-4,
    herald_delay: float = 1e-4,
    max_attempts: int | None = None,
    n_requests: int = 100,
    request_interval: float = 0.05,
    fidelity_target: float | None = None,
    purif_rounds: int = 0,
    max_retries: int | None = 3,
    timeout: float | None = None,
    swap_order: SwapOrder = "l2r",
    duration: float | None = None,
) -> SimulationConfig:
    """
    Build the configuration of a linear chain S-R1-...-D serving periodic S-D requests.

    Args:
        nodes: Number of nodes or list of node names.
        # QuantumMemory
        capacity: Number of memory slots per node.
        decay_rate: Werner parameter decay rate in 1/s.
        # QNode
        swap_prob: probability of successful entanglement swapping.
        # QuantumLink
        loss_prob: per-attempt failure probability, uniform or per link.
        base_fidelity: fidelity of generated pairs, uniform or per link.
        attempt_interval: seconds between attempts.
        herald_delay: seconds from a successful attempt to its herald.
        max_attempts: attempts allowed per generation job.
        # Requests
        n_requests: number of S-D requests.
        request_interval: seconds between request arrivals.
        fidelity_target: end-to-end fidelity target.
        purif_rounds: purification rounds per link segment.
        max_retries: full-path retries per request.
        timeout: per-attempt timeout in seconds.
        swap_order: swap order along the path.
    """
    if not isinstance(nodes, list):
        assert nodes >= 2, "at least two nodes"
        nodes = ["S", *[f"R{i}" for i in range(1, nodes - 1)], "D"]

    n_links = len(nodes) - 1
    if not isinstance(capacity, list):
        capacity = [capacity] * len(nodes)
    assert len(capacity) == len(nodes), f"capacity must have {len(nodes)} items"
    if not isinstance(loss_prob, list):
        loss_prob = [loss_prob] * n_links
    if not isinstance(base_fidelity, list):
        base_fidelity = [base_fidelity] * n_links
    assert len(loss_prob) == n_links and len(base_fidelity) == n_links, f"per-link lists must have {n_links} items"

    qnodes: list[TopoQNode] = [
        {"name": name, "capacity": cap, "decay_rate": decay_rate, "swap_prob": swap_prob} for name, cap in zip(nodes, capacity)
    ]
    links: list[TopoQLink] = []
    for i, (lp, bf) in enumerate(zip(loss_prob, base_fidelity)):
        links.append(
            {
                "node1": nodes[i],
                "node2": nodes[i + 1],
                "loss_prob": lp,
                "base_fidelity": bf,
                "attempt_interval": attempt_interval,
                "herald_delay": herald_delay,
                "max_attempts": max_attempts,
            }
        )
    topo: Topo = {"nodes": qnodes, "links": links}

    requests: list[RequestSpec] = [
        {
            "src": nodes[0],
            "dst": nodes[-1],
            "path": nodes,
            "fidelity_target": fidelity_target,
            "purif_rounds": purif_rounds,
            "max_retries": max_retries,
            "timeout": timeout,
            "start_time": i * request_interval,
        }
        for i in range(n_requests)
    ]

    config: SimulationConfig = {"topology": topo, "requests": requests, "swap_order": swap_order}
    if duration is not None:
        config["duration"] = duration
    return config
