import marimo

__generated_with = "0.18.3"
app = marimo.App()


@app.cell
def _():
    import git_playground as gp
    from IPython.lib.pretty import pprint
    return gp, pprint


@app.cell
def _(gp):
    r = gp.create_memory_repository({"README.md": "# Docs"})
    return (r,)


@app.cell
def _(pprint, r):
    pprint(r)
    return


@app.cell
def _(r):
    r.set("index.ts", 'console.log("Hello")')
    r.stage()
    r.commit("add index")
    return


@app.cell
def _(r):
    r.checkout("feat", create=True)
    r.set("style.css", "body { bg: black }")
    r.stage()
    r.commit("add style")
    r.checkout("main")
    r.merge("feat")
    return


@app.cell
def _(pprint, r):
    pprint(r)
    return


@app.cell
def _(gp):
    trial = gp.TrialEvaluator(gp.get_level(3))
    trial.apply("merge", "feat")
    return (trial,)


@app.cell
def _(pprint, trial):
    pprint(trial)
    return


if __name__ == "__main__":
    app.run()
