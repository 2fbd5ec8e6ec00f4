#!/usr/bin/env python3
"""
Basic usage example for sshnode.
"""

from sshnode import Node, RemoteCommand


def main():
    """Show the ssh invocation built for a command, then prepare a workspace."""
    command = RemoteCommand(
        {
            "host": "192.168.0.1",
            "user": "nci",
            "identity_file": "~/.ssh/id_rsa_01",
        }
    )
    print("ssh", *command.build("echo", ["it's", 'a "quoted" arg']))

    node = Node(
        "build-01",
        {
            "host": "192.168.0.1",
            "user": "nci",
            "identity_file": "~/.ssh/id_rsa_01",
            "base_dir": "/var/tmp/nci/data/projects",
        },
    )
    workspace = node.create_workspace("my-project")
    print(f"Workspace root: {workspace.workspace_root}")

    existed = workspace.ensure_ready()
    if existed:
        print("Workspace already checked out")
    else:
        print("Parent directory created, ready for checkout")

    workspace.run("ls", ["-la"])


if __name__ == "__main__":
    main()
