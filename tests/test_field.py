from kubeutil.field import new_path


def test_path_steps():
    steps = [
        (lambda p: p, "root"),
        (lambda p: p.child("first"), "root.first"),
        (lambda p: p.child("second"), "root.first.second"),
        (lambda p: p.index(0), "root.first.second[0]"),
        (lambda p: p.child("third"), "root.first.second[0].third"),
        (lambda p: p.index(93), "root.first.second[0].third[93]"),
        (lambda p: p.parent, "root.first.second[0].third"),
        (lambda p: p.parent, "root.first.second[0]"),
        (lambda p: p.key("key"), "root.first.second[0][key]"),
    ]
    root = new_path("root")
    p = root
    for i, (op, expected) in enumerate(steps):
        p = op(p)
        assert str(p) == expected, i
        assert p.root() is root, i


def test_path_multi_arg():
    steps = [
        (lambda p: p, "root.first"),
        (lambda p: p.child("second", "third"), "root.first.second.third"),
        (lambda p: p.index(0), "root.first.second.third[0]"),
        (lambda p: p.parent, "root.first.second.third"),
        (lambda p: p.parent, "root.first.second"),
        (lambda p: p.parent, "root.first"),
        (lambda p: p.parent, "root"),
    ]
    root = new_path("root", "first")
    p = root
    for i, (op, expected) in enumerate(steps):
        p = op(p)
        assert str(p) == expected, i
        assert p.root() is root.root(), i


def test_child_does_not_change_parent():
    base = new_path("a")
    base.child("b")
    assert str(base) == "a"
    assert base.parent is None