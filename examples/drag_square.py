"""Example: drag a corner of a room whose first wall has a fixed length."""

from roomplan import PolygonConstraintEngine

SQUARE = [(0.0, 0.0), (4.0, 0.0), (4.0, 3.0), (0.0, 3.0)]


def main() -> None:
    engine = PolygonConstraintEngine(SQUARE, angle_constraints={0: 90.0})
    engine.set_length_constraint(0, 1, 4.0)

    result = engine.move_vertex(1, (3.6, 0.4))
    print("Accepted:", result.accepted, "converged:", result.converged)
    for idx, (x, y) in enumerate(result.vertices):
        print(f"{idx}: ({x:.6f}, {y:.6f})")
    print(f"Wall 0-1: {engine.edge_length(0, 1):.6f} m")
    print(f"Corner 0: {engine.interior_angle(0):.6f} deg")


if __name__ == "__main__":
    main()
