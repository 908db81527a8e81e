from jtcrf import beliefpropagation as bp


def build_tree():
    '''
    Clique tree:

        0
        |- 1
        |  |- 2
        |- 3
           |- 4
              |- 5
                 |- 6
    '''

    edges = [(0, 1), (1, 2), (0, 3), (3, 4), (4, 5), (5, 6)]
    cliques = [bp.Clique(ix, [ix]) for ix in range(7)]
    separators = []
    for sep_ix, (c1, c2) in enumerate(edges):
        separators.append(bp.Separator(sep_ix, c1, c2, []))
        cliques[c1].separators.append(sep_ix)
        cliques[c2].separators.append(sep_ix)
    return cliques, separators


def test_traversal():
    cliques, separators = build_tree()

    assert [ix for ix, _, _ in bp.bf_traverse(cliques, separators, 0)] == [0, 1, 3, 2, 4, 5, 6]

    assert [ix for ix, _, _ in bp.df_traverse(cliques, separators, 0)] == [0, 1, 2, 3, 4, 5, 6]


def test_traversal_parents_and_entrances():
    cliques, separators = build_tree()

    assert list(bp.df_traverse(cliques, separators, 0)) == [
        (0, None, None),
        (1, 0, 0),
        (2, 1, 1),
        (3, 0, 2),
        (4, 3, 3),
        (5, 4, 4),
        (6, 5, 5),
    ]


def test_traversal_from_leaf():
    cliques, separators = build_tree()

    assert [ix for ix, _, _ in bp.df_traverse(cliques, separators, 6)] == [6, 5, 4, 3, 0, 1, 2]
    assert [ix for ix, _, _ in bp.bf_traverse(cliques, separators, 2)] == [2, 1, 0, 3, 4, 5, 6]


def test_traversal_of_single_clique():
    cliques = [bp.Clique(0, [0, 1])]

    assert list(bp.df_traverse(cliques, [], 0)) == [(0, None, None)]
    assert list(bp.bf_traverse(cliques, [], 0)) == [(0, None, None)]


def test_separator_other():
    _, separators = build_tree()

    assert separators[2].other(0) == 3
    assert separators[2].other(3) == 0
