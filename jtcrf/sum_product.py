import numpy as np


class SumProduct():
    ''' Sum-product distributive law over potentials keyed by variable ids '''


    def __init__(self, einsum, *args, **kwargs):
        self.func = einsum
        self.args = args
        self.kwargs = kwargs

    def einsum(self, *args, **kwargs):
        '''Performs Einstein summation over arrays labelled by arbitrary variable ids

        Arguments are interleaved arrays and variable lists followed by the
        output variable list:

            einsum(array1, vars1, ..., arrayN, varsN, output_vars)

        :param args: interleaved arrays/variable lists and the output variable list
        :param kwargs: key-word args passed on to the underlying einsum function
        :return: the resulting array with axes ordered as output_vars
        '''

        args_list = list(args)

        if len(args_list) % 2 == 0:
            raise ValueError("Output variables must be given explicitly")

        var_lists = args_list[1::2] + [args_list[-1]]

        # numpy.einsum only accepts small integer labels
        var_map = {}
        for vars in var_lists:
            for var in vars:
                var_map.setdefault(var, len(var_map))

        args_list[1::2] = [[var_map[var] for var in vars] for vars in args_list[1::2]]
        args_list[-1] = [var_map[var] for var in args_list[-1]]

        return self.func(*args_list, *self.args, **kwargs, **self.kwargs)


# setting optimize to true lets einsum reorder contractions at the cost of
# memory; clique tables are combined pairwise so the plain call is used
sum_product = SumProduct(np.einsum)
