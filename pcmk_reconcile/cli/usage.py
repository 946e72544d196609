def main() -> str:
    return """
Usage: pcmk-reconcile [-f file] [--debug] [--options json] <command> [args]
Converge a pacemaker cluster configuration to declared primitives,
constraints and properties.

Options:
    -h, --help  Display usage and exit.
    -f file     Read the cib from the file instead of the live cluster.
                Commands changing the cluster are run against the file.
    --debug     Do not change the cluster, print the commands which would be
                run together with cluster status reports.
    --options json
                Tune retrying and reporting, e.g.
                '{"retry_count": 10, "retry_step": 1, "prefetch": true}'.
    --version   Print version of pcmk-reconcile and exit.

Commands:
    apply [file]
        Read a json list of declarations from the file or from stdin and make
        the cluster match them. Each declaration is an object with a "kind"
        key (primitive, order, colocation, property, rsc-default), a "name"
        key and the fields of the kind:
            primitive: primitive_class, primitive_type, primitive_provider,
                parameters, operations, metadata, complex_type (clone or
                master), complex_metadata, ensure, cib, debug
            order, colocation: first, second, score, ensure, cib, debug
            property, rsc-default: value, ensure, cib, debug
        Print a json list of results.

    list <primitive | order | colocation | property | rsc-default>
        Print a json list of objects of the kind found in the cluster.

    report [tag]
        Print a status report of the cluster primitives.

    wait online
        Wait for the cluster to become online.

    wait <status | start | master | stop> <primitive id> [node]
        Wait for the primitive to get a known status, to start, to start as
        a master or to stop, optionally on the specified node.
"""
